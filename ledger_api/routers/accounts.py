"""
Accounts router - ledger account endpoints.

    GET    /accounts        - List all accounts
    POST   /accounts        - Open an account; returns it with a credential
    GET    /accounts/{id}   - Get one account        (owner only)
    DELETE /accounts/{id}   - Delete one account     (owner only)

The {id} endpoints depend on require_account_owner: the credential in the
token header must belong to the account being addressed, otherwise the
request ends with 403 before the handler runs.
"""

from fastapi import APIRouter, Depends

from ledger_api.dependencies import get_account_repository, require_account_owner
from ledger_api.executor import BoundedRoute
from ledger_api.models.account import Account
from ledger_api.repositories import AccountRepository
from ledger_api.schemas.account import (
    AccountCreateRequest,
    AccountDeletedResponse,
    AccountResponse,
)
from ledger_api.schemas.auth import SignupResponse
from ledger_api.services import account_service

router = APIRouter(route_class=BoundedRoute)


@router.get(
    "",
    response_model=list[AccountResponse],
    summary="List accounts",
)
async def list_accounts(
    repository: AccountRepository = Depends(get_account_repository),
):
    return await account_service.list_accounts(repository)


@router.post(
    "",
    response_model=SignupResponse,
    summary="Open a new account",
)
async def create_account(
    request: AccountCreateRequest,
    repository: AccountRepository = Depends(get_account_repository),
):
    """
    Open an account with a zero balance and a random account number.

    Returns the account and a credential for it, so the caller is logged in
    immediately:

    - **firstName** / **lastName**: Required, 1-50 characters
    - **password**: Required
    """
    account, token = await account_service.create_account(
        repository,
        first_name=request.first_name,
        last_name=request.last_name,
        password=request.password,
    )
    return SignupResponse(account=AccountResponse.model_validate(account), token=token)


@router.get(
    "/{id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(
    id: int,
    account: Account = Depends(require_account_owner),
):
    """Only the owner of the account (per the credential) may read it."""
    return account


@router.delete(
    "/{id}",
    response_model=AccountDeletedResponse,
    summary="Delete an account",
)
async def delete_account(
    id: int,
    account: Account = Depends(require_account_owner),
    repository: AccountRepository = Depends(get_account_repository),
):
    """Only the owner of the account (per the credential) may delete it."""
    account_id = account.id
    await account_service.delete_account(repository, account_id)
    return AccountDeletedResponse(message=f"deleted account with id {account_id}")
