"""
Transfer service.

Transfers are accepted and acknowledged but move no money: debiting one
account and crediting another atomically is outside this service's scope.
The validated request is logged and echoed back to the caller.
"""

import logging

from ledger_api.schemas.transfer import TransferRequest

logger = logging.getLogger(__name__)


async def request_transfer(request: TransferRequest) -> TransferRequest:
    # TODO: apply the debit/credit pair once two-account atomicity lands in the repository
    logger.info("Transfer requested to=%s value=%s", request.to, request.value)
    return request
