"""
Transfers router.

    POST /transfer - request a transfer to another account number

The request is validated and acknowledged by echoing it back; balances are
not changed.
"""

from fastapi import APIRouter

from ledger_api.executor import BoundedRoute
from ledger_api.schemas.transfer import TransferRequest
from ledger_api.services import transfer_service

router = APIRouter(route_class=BoundedRoute)


@router.post(
    "",
    response_model=TransferRequest,
    summary="Request a transfer",
)
async def create_transfer(request: TransferRequest):
    return await transfer_service.request_transfer(request)
