"""
Claim-based authorization guard.

A guarded request must present a credential whose subject (an account
number) owns the account addressed by the path. The check runs in order
and stops at the first failure:

  1. credential present            else Forbidden (missing)
  2. credential verifies           else Forbidden (malformed / bad signature / expired)
  3. path id resolves to account   else Forbidden (unknown resource)
  4. account.number == subject     else Forbidden (mismatch)
  -> Authorized, the account is returned to the handler

All Forbidden outcomes raise the same AuthError with the same public
message. Which step failed is logged, never sent to the caller.
"""

import logging

from ledger_api.exceptions import AuthError, AuthReason, LedgerAPIError
from ledger_api.models.account import Account
from ledger_api.repositories import AccountRepository
from ledger_api.security import TokenVerifier

logger = logging.getLogger(__name__)


class AuthorizationGuard:
    def __init__(self, repository: AccountRepository, verifier: TokenVerifier):
        self.repository = repository
        self.verifier = verifier

    async def authorize(
        self,
        token: str | None,
        resource_id: str | int | None,
        request_path: str | None = None,
    ) -> Account:
        """
        Decide whether ``token`` may act on the account with ``resource_id``.

        ``request_path`` only labels the log record written on refusal.

        Returns:
            The account being accessed.

        Raises:
            AuthError: For every failure, whatever the reason.
        """
        try:
            return await self._authorize(token, resource_id)
        except AuthError as exc:
            logger.warning(
                "Authorization denied for resource %s",
                resource_id,
                extra={"reason": exc.reason.value, "request_path": request_path},
            )
            raise

    async def _authorize(self, token: str | None, resource_id: str | int | None) -> Account:
        if not token or not token.strip():
            raise AuthError(AuthReason.MISSING)

        claims = self.verifier.verify(token.strip())

        try:
            account_id = int(resource_id)
        except (TypeError, ValueError):
            raise AuthError(AuthReason.UNKNOWN_RESOURCE)

        try:
            account = await self.repository.get_by_id(account_id)
        except LedgerAPIError:
            raise AuthError(AuthReason.UNKNOWN_RESOURCE)

        if account.number != claims.subject:
            raise AuthError(AuthReason.MISMATCH)

        return account
