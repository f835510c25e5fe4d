"""
Health router.

    GET /health - liveness probe for load balancers and orchestrators

Mounted like every other router, so it answers within the same request
deadline.
"""

from fastapi import APIRouter

from ledger_api.config import settings
from ledger_api.executor import BoundedRoute

router = APIRouter(route_class=BoundedRoute)


@router.get("/health", summary="Liveness probe")
async def health_check():
    return {"status": "ok", "version": settings.APP_VERSION}
