"""
SQLAlchemy-backed AccountRepository.

Works against any async engine (aiosqlite by default, asyncpg for
PostgreSQL). Driver errors never escape as-is: they're logged with the full
statement and re-raised as InfrastructureError with a fixed message, so
callers see a 500 with the envelope and none of the SQL or its parameters.

A failed statement rolls the session back before raising, leaving it usable
for whoever commits or closes it afterwards.
"""

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.exceptions import AccountNotFoundError, InfrastructureError
from ledger_api.models.account import Account

logger = logging.getLogger(__name__)


class SqlAccountRepository:
    """AccountRepository over an AsyncSession owned by the caller."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(self, account: Account) -> Account:
        try:
            self.session.add(account)
            # Flush so the database assigns account.id now
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self._fail("Failed to insert account number=%s", account.number)
            raise InfrastructureError("could not store account") from exc
        return account

    async def get_by_id(self, account_id: int) -> Account:
        account = await self._scalar_one(select(Account).where(Account.id == account_id))
        if account is None:
            raise AccountNotFoundError(account_id=account_id)
        return account

    async def get_by_number(self, number: int) -> Account:
        account = await self._scalar_one(select(Account).where(Account.number == number))
        if account is None:
            raise AccountNotFoundError(number=number)
        return account

    async def list(self) -> list[Account]:
        try:
            result = await self.session.execute(select(Account).order_by(Account.id))
        except SQLAlchemyError as exc:
            await self._fail("Failed to list accounts")
            raise InfrastructureError("could not list accounts") from exc
        return list(result.scalars().all())

    async def delete(self, account_id: int) -> None:
        await self.get_by_id(account_id)
        try:
            await self.session.execute(delete(Account).where(Account.id == account_id))
            await self.session.flush()
        except SQLAlchemyError as exc:
            await self._fail("Failed to delete account id=%s", account_id)
            raise InfrastructureError("could not delete account") from exc

    async def _scalar_one(self, statement) -> Account | None:
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as exc:
            await self._fail("Account lookup failed")
            raise InfrastructureError("account lookup failed") from exc
        return result.scalar_one_or_none()

    async def _fail(self, message: str, *args) -> None:
        # Called from inside an except block, so the driver error is attached
        logger.exception(message, *args)
        await self.session.rollback()
