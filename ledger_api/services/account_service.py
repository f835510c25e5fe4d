"""
Account service - business logic for ledger accounts.

This module handles:
  - Account creation (with unique account number generation) and the
    credential handed back to the new owner
  - Listing, retrieval and deletion

Storage is reached only through an AccountRepository, so these functions
run unchanged against the SQL repository or the in-memory test double.
Repository errors (not found, infrastructure) propagate with their own
status.
"""

import logging

from starlette.concurrency import run_in_threadpool

from ledger_api.exceptions import AccountNotFoundError, InfrastructureError
from ledger_api.models.account import Account, generate_account_number
from ledger_api.repositories import AccountRepository
from ledger_api.security import token_issuer

logger = logging.getLogger(__name__)

MAX_NUMBER_ATTEMPTS = 10


async def _number_is_free(repository: AccountRepository, number: int) -> bool:
    try:
        await repository.get_by_number(number)
    except AccountNotFoundError:
        return True
    return False


async def create_account(
    repository: AccountRepository,
    first_name: str,
    last_name: str,
    password: str,
) -> tuple[Account, str]:
    """
    Open a new account and log its owner in.

    The balance starts at 0. The account number is re-drawn on collision
    (extremely unlikely, but the number must be unique).

    Returns:
        Tuple of (Account with its id assigned, credential string).

    Raises:
        CreationError: If the password can't be hashed.
        InfrastructureError: If storage fails or no free number is found.
    """
    # Argon2 is CPU-bound; keep it off the event loop
    account = await run_in_threadpool(Account.create, first_name, last_name, password)

    for _ in range(MAX_NUMBER_ATTEMPTS):
        if await _number_is_free(repository, account.number):
            break
        account.number = generate_account_number()
    else:
        raise InfrastructureError("failed to generate a unique account number")

    account = await repository.create(account)
    logger.info("Created account id=%s number=%s", account.id, account.number)

    return account, token_issuer.issue(account)


async def list_accounts(repository: AccountRepository) -> list[Account]:
    return list(await repository.list())


async def get_account(repository: AccountRepository, account_id: int) -> Account:
    """Raises AccountNotFoundError if there's no such account."""
    return await repository.get_by_id(account_id)


async def delete_account(repository: AccountRepository, account_id: int) -> None:
    """
    Delete an account.

    Raises:
        AccountNotFoundError: If the account doesn't exist (404).
    """
    await repository.delete(account_id)
    logger.info("Deleted account id=%s", account_id)
