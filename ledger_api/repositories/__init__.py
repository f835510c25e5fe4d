"""
Account persistence boundary.

The rest of the application talks to storage only through the
AccountRepository protocol, so the SQL implementation can be swapped for
any object with the same five operations (the test suite uses an
in-memory one).
"""

from typing import Protocol, Sequence

from ledger_api.models.account import Account
from ledger_api.repositories.sql import SqlAccountRepository  # noqa: F401


class AccountRepository(Protocol):
    """
    Abstraction over account persistence.

    Implementations are responsible for:
    - Assigning the account id on create.
    - Raising AccountNotFoundError for a missing id or number.
    - Raising InfrastructureError when the backing store fails.

    Implementations must be safe to call from concurrent requests; callers
    impose no locking of their own.
    """

    async def create(self, account: Account) -> Account:
        """Persist a new account and return it with its id assigned."""
        ...

    async def get_by_id(self, account_id: int) -> Account:
        ...

    async def get_by_number(self, number: int) -> Account:
        ...

    async def list(self) -> Sequence[Account]:
        ...

    async def delete(self, account_id: int) -> None:
        """Remove an account. Raises AccountNotFoundError if it doesn't exist."""
        ...
