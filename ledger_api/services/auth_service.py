"""
Authentication service - login business logic.

Login flow:
  1. Look up the account by its public number
  2. Verify the password against the stored hash
  3. Return a freshly issued credential

Security notes:
  - An unknown number and a wrong password produce the same error, so
    callers can't probe which account numbers exist
  - Credentials are stateless; nothing is stored on login
"""

from starlette.concurrency import run_in_threadpool

from ledger_api.exceptions import AccountNotFoundError, InvalidCredentialsError
from ledger_api.models.account import Account
from ledger_api.repositories import AccountRepository
from ledger_api.security import token_issuer


async def login(
    repository: AccountRepository,
    number: int,
    password: str,
) -> tuple[Account, str]:
    """
    Authenticate an account owner and return a credential.

    Returns:
        Tuple of (Account, credential string).

    Raises:
        InvalidCredentialsError (403): Unknown number or wrong password.
    """
    try:
        account = await repository.get_by_number(number)
    except AccountNotFoundError:
        raise InvalidCredentialsError()

    if not await run_in_threadpool(account.verify_password, password):
        raise InvalidCredentialsError()

    return account, token_issuer.issue(account)
