"""
Authentication router.

    POST /login - exchange an account number + password for a credential

The credential must be sent back in the token header (``x-jwt-token`` by
default) on every owner-only endpoint. It expires after
ACCESS_TOKEN_EXPIRE_MINUTES.

Plaintext passwords exist only in memory while the request is processed;
they're never logged.
"""

from fastapi import APIRouter, Depends

from ledger_api.dependencies import get_account_repository
from ledger_api.executor import BoundedRoute
from ledger_api.repositories import AccountRepository
from ledger_api.schemas.auth import LoginRequest, LoginResponse
from ledger_api.services import auth_service

router = APIRouter(route_class=BoundedRoute)


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Authenticate and get a credential",
)
async def login(
    request: LoginRequest,
    repository: AccountRepository = Depends(get_account_repository),
):
    """
    Authenticate with an account number and password.

    A wrong password and an unknown number both return 403 with the same
    message.
    """
    account, token = await auth_service.login(
        repository,
        number=request.number,
        password=request.password,
    )
    return LoginResponse(number=account.number, token=token)
