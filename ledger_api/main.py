"""
FastAPI application factory and entry point.

This module creates and configures the FastAPI application:
  1. Lifespan manager - logging setup, DB table creation, engine cleanup
  2. CORS middleware - allows frontend origins to make cross-origin requests
  3. Exception handlers - map errors to the {"error": ...} JSON envelope
  4. Router registration - mounts the account, login, transfer and health endpoints

Every router uses BoundedRoute, so each request is answered exactly once
within REQUEST_TIMEOUT_SECONDS.

Running locally:
    uvicorn ledger_api.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ledger_api.config import settings
from ledger_api.database import engine, Base
from ledger_api.exceptions import register_exception_handlers
from ledger_api.logging_config import setup_logging
from ledger_api.routers import accounts, auth, health, transfers

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Startup:
      Configures logging and creates the tables if they don't exist.
      Schema migrations are not handled here.

    Shutdown:
      Disposes of the database engine, closing all connections cleanly.
    """
    setup_logging(settings.LOG_LEVEL)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("%s %s started", settings.APP_NAME, settings.APP_VERSION)
    yield
    await engine.dispose()


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Account ledger with owner-scoped access and bounded request execution",
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

register_exception_handlers(app)

# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(accounts.router, prefix="/accounts", tags=["Accounts"])
app.include_router(auth.router, tags=["Auth"])
app.include_router(transfers.router, prefix="/transfer", tags=["Transfers"])
app.include_router(health.router, tags=["Health"])
