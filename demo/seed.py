#!/usr/bin/env python3
"""
Demo seed script - opens sample accounts through the running API.

!! NOT FOR PRODUCTION !!
This script creates accounts with known passwords. It is intended ONLY for
local demos and frontend development.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Drop and recreate the tables first (talks to DATABASE_URL directly):
    python demo/seed.py --reset

    # Only reset, don't seed:
    python demo/seed.py --reset --exit

    # Custom server URL / output file:
    python demo/seed.py --base-url http://localhost:9000 --output demo-accounts.json

The created accounts, including their numbers and freshly issued tokens,
are written to the output file (default: accounts.json), replacing any
previous one. Every account's password is the one listed in DEMO_ACCOUNTS.
"""

import argparse
import asyncio
import json
import os
import sys

import httpx

BASE_URL = "http://localhost:8000"

# ---------------------------------------------------------------------------
# Demo accounts
# ---------------------------------------------------------------------------

DEMO_ACCOUNTS = [
    {"firstName": "Shreyash", "lastName": "Pandey", "password": "Test@123"},
    {"firstName": "Jeewan", "lastName": "Singh", "password": "Test@123"},
    {"firstName": "Anamay", "lastName": "Pathak", "password": "Test@123"},
    {"firstName": "John", "lastName": "Doe", "password": "Test@123"},
]


def log(msg: str) -> None:
    print(f"  {msg}")


async def open_account(client: httpx.AsyncClient, body: dict) -> dict:
    """Open one account, return {account: {...}, token: ...}."""
    resp = await client.post(f"{BASE_URL}/accounts", json=body)
    resp.raise_for_status()
    return resp.json()


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str, output: str) -> None:
    global BASE_URL
    BASE_URL = base_url.rstrip("/")

    print("\n========================================")
    print("  DEMO SEED - NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            await client.get(f"{BASE_URL}/health")
        except httpx.ConnectError:
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: uvicorn ledger_api.main:app --reload\n")
            sys.exit(1)

        print("Opening accounts...")
        created = await asyncio.gather(
            *(open_account(client, body) for body in DEMO_ACCOUNTS)
        )

    for entry in created:
        account = entry["account"]
        log(f"{account['firstName']} {account['lastName']}: id={account['id']} number={account['number']}")

    write_accounts(output, created)

    print("\n========================================")
    print("  SEED COMPLETE")
    print("========================================\n")


def write_accounts(filename: str, created: list[dict]) -> None:
    """Write the seeded accounts to ``filename``, replacing an existing file."""
    if os.path.exists(filename):
        os.remove(filename)

    with open(filename, "w", encoding="utf-8") as fh:
        json.dump(created, fh, indent="\t")

    log(f"Data has been written to {filename}")


async def reset_database() -> None:
    """Drop and recreate all tables in the database named by DATABASE_URL."""
    from ledger_api.database import engine, reset_tables
    import ledger_api.models  # noqa: F401  (registers the tables)

    await reset_tables()
    await engine.dispose()
    print("\n  Dropped and recreated all tables.\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script - NOT FOR PRODUCTION",
        epilog="Opens sample accounts through the API and saves them to a JSON file.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--output", default="accounts.json",
        help="Where to write the seeded accounts (default: accounts.json)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Drop and recreate the tables before seeding",
    )
    parser.add_argument(
        "--exit", action="store_true",
        help="Stop after --reset without seeding",
    )
    args = parser.parse_args()

    if args.reset:
        await reset_database()

    if args.exit:
        return

    await seed(args.base_url, args.output)


if __name__ == "__main__":
    asyncio.run(main())
