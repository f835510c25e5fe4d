"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables, with an optional .env file
as a fallback. The signing secret in particular is injected at startup and never
lives in source code.

Pydantic Settings resolves values in this order:
  1. Environment variables (highest priority)
  2. .env file values
  3. Defaults defined here (lowest priority)

Usage:
    from ledger_api.config import settings
    print(settings.REQUEST_TIMEOUT_SECONDS)
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Central configuration for the Ledger API.

    Required fields (no defaults) MUST be set in .env or environment:
      - SECRET_KEY: Used to sign and verify credentials
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # --- Application ---
    APP_NAME: str = "Ledger API"
    APP_VERSION: str = "0.1.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # --- Database ---
    # Any async SQLAlchemy URL works, e.g. postgresql+asyncpg://user:pw@host/ledger
    DATABASE_URL: str = "sqlite+aiosqlite:///./ledger.db"

    # --- Authentication ---
    # REQUIRED: No default, the process refuses to start without a real secret
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 30

    # Header that carries the credential on guarded endpoints
    TOKEN_HEADER: str = "x-jwt-token"

    # --- Request execution ---
    # Wall-clock budget for every request, in seconds
    REQUEST_TIMEOUT_SECONDS: float = 30.0

    # --- CORS ---
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000"]


# Singleton: import this instance everywhere instead of creating new Settings()
settings = Settings()
