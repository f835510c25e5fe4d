"""
Test fixtures for the Ledger API test suite.

This module provides shared fixtures used across all test files:

  - db_engine: Fresh in-memory SQLite database for each test
  - client: Async HTTP test client wired to that database
  - signed_up: An account opened through POST /accounts, with its token
  - repository: An empty in-memory AccountRepository for unit tests

Key design decisions:
  - SECRET_KEY is set before the application is imported, because settings
    are read once at import time.
  - In-memory SQLite (sqlite+aiosqlite://) keeps each test isolated.
  - get_db is overridden so the application code runs exactly as it does
    in production, just against the test database.
  - Guard and service unit tests use InMemoryAccountRepository instead of
    SQL; it implements the same five-operation protocol.
"""

import os

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from ledger_api.database import Base, get_db
from ledger_api.exceptions import AccountNotFoundError, InfrastructureError
from ledger_api.main import app
from ledger_api.models.account import Account


TEST_DATABASE_URL = "sqlite+aiosqlite://"


class InMemoryAccountRepository:
    """AccountRepository kept in a dict, for tests that don't need SQL."""

    def __init__(self):
        self.accounts: dict[int, Account] = {}
        self._next_id = 1

    async def create(self, account: Account) -> Account:
        if any(a.number == account.number for a in self.accounts.values()):
            raise InfrastructureError(f"duplicate account number {account.number}")
        if account.id is None:
            while self._next_id in self.accounts:
                self._next_id += 1
            account.id = self._next_id
        self.accounts[account.id] = account
        return account

    async def get_by_id(self, account_id: int) -> Account:
        try:
            return self.accounts[account_id]
        except KeyError:
            raise AccountNotFoundError(account_id=account_id)

    async def get_by_number(self, number: int) -> Account:
        for account in self.accounts.values():
            if account.number == number:
                return account
        raise AccountNotFoundError(number=number)

    async def list(self) -> list[Account]:
        return sorted(self.accounts.values(), key=lambda a: a.id)

    async def delete(self, account_id: int) -> None:
        await self.get_by_id(account_id)
        del self.accounts[account_id]


@pytest.fixture
def repository():
    return InMemoryAccountRepository()


@pytest_asyncio.fixture
async def db_engine():
    """Create a fresh async engine with all tables for each test."""
    engine = create_async_engine(TEST_DATABASE_URL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_engine):
    """
    Async HTTP test client with the test database injected.

    This overrides the get_db dependency so all requests hit the
    in-memory test database instead of the real one.
    """
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async def override_get_db():
        async with async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def signed_up(client):
    """
    An account opened through the real signup endpoint.

    Returns the response body: {"account": {...}, "token": "..."}.
    """
    response = await client.post(
        "/accounts",
        json={"firstName": "Test", "lastName": "User", "password": "hunter2"},
    )
    assert response.status_code == 200, f"Signup failed: {response.text}"
    return response.json()
