"""
Tests for the Account entity: construction and password verification.

These tests verify:
  - A created account verifies its own password and rejects others
  - New accounts start at zero balance with no id and a UTC timestamp
  - Hashing failures surface as CreationError
  - A broken stored hash is an infrastructure failure, not a mismatch
"""

from datetime import timezone

import pytest

from ledger_api.exceptions import CreationError, InfrastructureError
from ledger_api.models.account import ACCOUNT_NUMBER_MAX, ACCOUNT_NUMBER_MIN, Account


class TestAccountCreate:

    @pytest.mark.parametrize(
        "first_name, last_name, password",
        [
            ("A", "B", "hunter2"),
            ("Shreyash", "Pandey", "Test@123"),
            ("Zoë", "Ångström", "pässwörd with spaces"),
        ],
    )
    def test_password_round_trip(self, first_name, last_name, password):
        account = Account.create(first_name, last_name, password)
        assert account.verify_password(password) is True
        assert account.verify_password(password + "x") is False

    def test_initial_state(self):
        account = Account.create("Jane", "Doe", "hunter2")
        assert account.id is None
        assert account.balance == 0
        assert account.first_name == "Jane"
        assert account.last_name == "Doe"
        assert ACCOUNT_NUMBER_MIN <= account.number <= ACCOUNT_NUMBER_MAX
        assert account.created_at.tzinfo == timezone.utc

    def test_password_is_hashed(self):
        account = Account.create("Jane", "Doe", "hunter2")
        assert account.hashed_password != "hunter2"
        assert account.hashed_password.startswith("$argon2")

    def test_oversized_password_raises_creation_error(self):
        with pytest.raises(CreationError) as exc_info:
            Account.create("Jane", "Doe", "x" * 10_000)
        assert exc_info.value.status_code == 500
        assert exc_info.value.detail == "could not create account"


class TestVerifyPassword:

    def test_oversized_candidate_is_a_mismatch(self):
        account = Account.create("Jane", "Doe", "hunter2")
        assert account.verify_password("x" * 10_000) is False

    def test_unusable_stored_hash_raises(self):
        account = Account(
            id=1,
            first_name="Jane",
            last_name="Doe",
            number=123456,
            hashed_password="definitely-not-a-hash",
            balance=0,
        )
        with pytest.raises(InfrastructureError) as exc_info:
            account.verify_password("hunter2")
        assert "definitely-not-a-hash" not in exc_info.value.detail
