"""
FastAPI dependencies for storage access and authorization.

Dependencies are reusable functions that FastAPI injects into route handlers:

  get_db (session)
      └── get_account_repository (session -> AccountRepository)
              └── require_account_owner (credential + path id -> Account)

Every identifier-scoped endpoint declares require_account_owner. If the
guard refuses, the request ends with a 403 before the route body runs.
Because routes use BoundedRoute, all of this happens inside the request
deadline.
"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from ledger_api.authorization import AuthorizationGuard
from ledger_api.config import settings
from ledger_api.database import get_db
from ledger_api.models.account import Account
from ledger_api.repositories import AccountRepository, SqlAccountRepository
from ledger_api.security import token_verifier


async def get_account_repository(
    db: AsyncSession = Depends(get_db),
) -> AccountRepository:
    """Provide the request's AccountRepository, bound to its DB session."""
    return SqlAccountRepository(db)


async def require_account_owner(
    request: Request,
    repository: AccountRepository = Depends(get_account_repository),
) -> Account:
    """
    Authorize the caller against the account named by the ``{id}`` path param.

    The credential is read from the configured header (``x-jwt-token`` by
    default). The raw path value is passed through unparsed so that a
    non-numeric id is refused like any other failure.

    Returns:
        The account the caller owns.

    Raises:
        AuthError (403): For any failure.
    """
    guard = AuthorizationGuard(repository, token_verifier)
    return await guard.authorize(
        request.headers.get(settings.TOKEN_HEADER),
        request.path_params.get("id"),
        request_path=request.url.path,
    )
