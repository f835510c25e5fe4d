"""
Tests for account endpoints.

These tests verify:
  - Signup (POST /accounts) returns the account with a zero balance and a token
  - The returned token already grants access to the new account
  - Listing returns every account, without password material
  - Owners can read and delete their account
  - Malformed bodies are a 400 with the error envelope
  - Unsupported methods are a 400 with the error envelope
  - Storage failures are a 500 with a fixed message, no SQL or hashes
  - A failed write leaves the session usable for later requests
"""

import pytest
from fastapi.routing import APIRoute
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.dependencies import get_account_repository
from ledger_api.exceptions import InfrastructureError
from ledger_api.executor import BoundedRoute
from ledger_api.main import app
from ledger_api.models import account as account_module
from ledger_api.models.account import Account
from ledger_api.repositories import SqlAccountRepository
from ledger_api.security import token_verifier
from ledger_api.services import account_service


class TestAccountCreation:
    """Tests for POST /accounts."""

    async def test_create_account(self, client):
        response = await client.post(
            "/accounts",
            json={"firstName": "A", "lastName": "B", "password": "hunter2"},
        )
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"

        data = response.json()
        account = data["account"]
        assert account["balance"] == 0
        assert account["firstName"] == "A"
        assert account["lastName"] == "B"
        assert isinstance(account["id"], int)
        assert isinstance(account["number"], int)
        assert "createdAt" in account
        assert data["token"]

    async def test_token_subject_is_account_number(self, client, signed_up):
        claims = token_verifier.verify(signed_up["token"])
        assert claims.subject == signed_up["account"]["number"]

    async def test_password_never_returned(self, client, signed_up):
        account = signed_up["account"]
        assert "password" not in account
        assert "hashedPassword" not in account
        assert "hashed_password" not in account

    async def test_accounts_get_distinct_ids_and_numbers(self, client):
        created = []
        for name in ("One", "Two", "Three"):
            response = await client.post(
                "/accounts",
                json={"firstName": name, "lastName": "User", "password": "pw"},
            )
            created.append(response.json()["account"])

        assert len({a["id"] for a in created}) == 3
        assert len({a["number"] for a in created}) == 3

    @pytest.mark.parametrize(
        "body",
        [
            {"firstName": "A", "lastName": "B"},
            {"firstName": "", "lastName": "B", "password": "pw"},
            {"lastName": "B", "password": "pw"},
            {},
        ],
    )
    async def test_invalid_body_is_400(self, client, body):
        response = await client.post("/accounts", json=body)
        assert response.status_code == 400
        assert "error" in response.json()

    async def test_malformed_json_is_400(self, client):
        response = await client.post(
            "/accounts",
            content=b"{not json",
            headers={"content-type": "application/json"},
        )
        assert response.status_code == 400
        assert "error" in response.json()


class TestAccountListing:
    """Tests for GET /accounts."""

    async def test_empty_list(self, client):
        response = await client.get("/accounts")
        assert response.status_code == 200
        assert response.json() == []

    async def test_list_contains_created_accounts(self, client, signed_up):
        await client.post(
            "/accounts",
            json={"firstName": "Second", "lastName": "User", "password": "pw"},
        )
        response = await client.get("/accounts")
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 2
        assert signed_up["account"]["id"] in {a["id"] for a in data}
        assert all("hashedPassword" not in a for a in data)


class TestOwnerAccess:
    """Tests for GET and DELETE /accounts/{id} as the owner."""

    async def test_get_own_account(self, client, signed_up):
        account_id = signed_up["account"]["id"]
        response = await client.get(
            f"/accounts/{account_id}",
            headers={"x-jwt-token": signed_up["token"]},
        )
        assert response.status_code == 200
        data = response.json()
        for field in ("id", "firstName", "lastName", "number", "balance"):
            assert data[field] == signed_up["account"][field]

    async def test_delete_own_account(self, client, signed_up):
        account_id = signed_up["account"]["id"]
        response = await client.delete(
            f"/accounts/{account_id}",
            headers={"x-jwt-token": signed_up["token"]},
        )
        assert response.status_code == 200
        assert response.json() == {"message": f"deleted account with id {account_id}"}

        listing = await client.get("/accounts")
        assert listing.json() == []

    async def test_deleted_account_is_no_longer_reachable(self, client, signed_up):
        account_id = signed_up["account"]["id"]
        headers = {"x-jwt-token": signed_up["token"]}
        await client.delete(f"/accounts/{account_id}", headers=headers)

        response = await client.get(f"/accounts/{account_id}", headers=headers)
        assert response.status_code == 403

    async def test_delete_missing_account_without_credential(self, client):
        response = await client.delete("/accounts/9999")
        assert response.status_code == 403


class TestRouting:

    async def test_unsupported_method_on_collection(self, client):
        response = await client.put("/accounts", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "method not allowed - PUT"}

    async def test_unsupported_method_on_item(self, client, signed_up):
        response = await client.patch(f"/accounts/{signed_up['account']['id']}", json={})
        assert response.status_code == 400
        assert response.json() == {"error": "method not allowed - PATCH"}

    async def test_unknown_route_is_json_404(self, client):
        response = await client.get("/nowhere")
        assert response.status_code == 404
        assert "error" in response.json()

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_every_route_is_bounded(self):
        api_routes = [route for route in app.routes if isinstance(route, APIRoute)]
        assert "/health" in {route.path for route in api_routes}
        assert all(isinstance(route, BoundedRoute) for route in api_routes)


class UnreachableSession:
    """Stands in for an AsyncSession whose database has gone away."""

    def __init__(self):
        self.rolled_back = False

    async def execute(self, statement):
        raise OperationalError(
            "SELECT accounts.id, accounts.hashed_password FROM accounts",
            {},
            Exception("unable to open database file"),
        )

    async def rollback(self):
        self.rolled_back = True


class TestStorageFailures:
    """Storage errors reach the client as a bare 500 envelope."""

    async def test_number_taken_at_insert_is_a_generic_500(self, client, signed_up, monkeypatch):
        taken = signed_up["account"]["number"]

        async def always_free(repository, number):
            return True

        monkeypatch.setattr(account_service, "_number_is_free", always_free)
        monkeypatch.setattr(account_module, "generate_account_number", lambda: taken)

        response = await client.post(
            "/accounts",
            json={"firstName": "Dup", "lastName": "Number", "password": "hunter2"},
        )
        assert response.status_code == 500
        assert response.json() == {"error": "could not store account"}
        assert "INSERT" not in response.text
        assert "$argon2" not in response.text

        listing = await client.get("/accounts")
        assert listing.status_code == 200
        assert [a["number"] for a in listing.json()] == [taken]

    async def test_unreachable_database_is_a_generic_500(self, client, signed_up):
        session = UnreachableSession()
        app.dependency_overrides[get_account_repository] = lambda: SqlAccountRepository(session)
        try:
            response = await client.get("/accounts")
        finally:
            del app.dependency_overrides[get_account_repository]

        assert response.status_code == 500
        assert response.json() == {"error": "could not list accounts"}
        assert "SELECT" not in response.text
        assert session.rolled_back

        follow_up = await client.get("/accounts")
        assert follow_up.status_code == 200
        assert len(follow_up.json()) == 1

    async def test_failed_insert_rolls_the_session_back(self, db_engine):
        async with AsyncSession(db_engine, expire_on_commit=False) as session:
            repository = SqlAccountRepository(session)
            first = await repository.create(Account.create("First", "Owner", "pw"))
            await session.commit()
            first_id, first_number = first.id, first.number

            duplicate = Account.create("Second", "Owner", "pw")
            duplicate.number = first_number
            with pytest.raises(InfrastructureError) as exc_info:
                await repository.create(duplicate)
            assert exc_info.value.detail == "could not store account"

            # The session is usable again without an explicit rollback
            await session.commit()
            found = await repository.get_by_number(first_number)
            assert found.id == first_id
