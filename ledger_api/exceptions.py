"""
Custom exception classes and FastAPI exception handlers.

Every domain error carries two things: a human-readable message and an
explicit HTTP status. Services and the authorization guard raise these
without importing any HTTP machinery; the executor and the handlers
registered here turn them into the uniform JSON envelope:

    {"error": "<message>"}

Exception hierarchy:
    LedgerAPIError (base, 500)
    ├── InvalidRequestError      - malformed JSON or body (400)
    ├── MethodNotAllowedError    - unsupported method on a route (400)
    ├── AccountNotFoundError     - requested account doesn't exist (404)
    ├── AuthError                - any credential/ownership failure (403)
    ├── InvalidCredentialsError  - login with a bad number/password (403)
    ├── RequestTimeoutError      - deadline elapsed, executor only (408)
    ├── InfrastructureError      - storage or hashing backend failure (500)
    └── CreationError            - an account could not be built (500)
"""

import enum

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger_api.responses import error_response


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class LedgerAPIError(Exception):
    """Base exception for all Ledger API domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, detail: str = "An error occurred", status_code: int | None = None):
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.detail)


def make_api_error(
    exc: BaseException,
    status_code: int,
    detail: str | None = None,
) -> LedgerAPIError:
    """
    Wrap an arbitrary exception into a LedgerAPIError with the given status.

    An exception that is already a LedgerAPIError is returned unchanged, so a
    typed error keeps its original status instead of collapsing into the
    caller's default. Anything else gets ``detail`` as its public message
    when one is given, so the wrapped exception's text stays internal.
    """
    if isinstance(exc, LedgerAPIError):
        return exc
    return LedgerAPIError(detail if detail is not None else str(exc), status_code)


# ---------------------------------------------------------------------------
# Domain exceptions
# ---------------------------------------------------------------------------

class InvalidRequestError(LedgerAPIError):
    """Raised when the request body or parameters can't be parsed."""

    status_code = status.HTTP_400_BAD_REQUEST


class MethodNotAllowedError(LedgerAPIError):
    """Raised when a route is hit with a method it doesn't serve."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, method: str):
        self.method = method
        super().__init__(f"method not allowed - {method}")


class AccountNotFoundError(LedgerAPIError):
    """Raised when a requested account does not exist."""

    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, account_id: int | None = None, number: int | None = None):
        self.account_id = account_id
        self.number = number
        if number is not None:
            super().__init__(f"account with number {number} not found")
        else:
            super().__init__(f"account with id {account_id} not found")


class AuthReason(str, enum.Enum):
    """Why a credential or ownership check failed. Logged, never returned."""
    MISSING = "missing"
    MALFORMED = "malformed"
    BAD_SIGNATURE = "bad_signature"
    EXPIRED = "expired"
    UNKNOWN_RESOURCE = "unknown_resource"
    MISMATCH = "mismatch"


class AuthError(LedgerAPIError):
    """
    Raised for every authorization failure.

    The public message is the same whatever went wrong, so a caller can't
    tell a missing token from an expired one or from someone else's account.
    The specific cause is kept on ``reason`` for logging.
    """

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, reason: AuthReason):
        self.reason = reason
        super().__init__("permission denied")


class InvalidCredentialsError(LedgerAPIError):
    """Raised when login credentials are incorrect."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self):
        super().__init__("wrong account number or password")


class RequestTimeoutError(LedgerAPIError):
    """Produced by the executor when a handler misses its deadline."""

    status_code = status.HTTP_408_REQUEST_TIMEOUT

    def __init__(self):
        super().__init__("request timed out")


class InfrastructureError(LedgerAPIError):
    """Raised when storage or another backend fails."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class CreationError(LedgerAPIError):
    """Raised when a new account can't be constructed (e.g. hashing failed)."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register the envelope-producing exception handlers on the application.

    Called once from main.py. Domain errors raised by a handler are normally
    answered by the executor itself; these cover errors raised outside it
    (routing, request validation) and keep every body in the same shape.
    """

    @app.exception_handler(LedgerAPIError)
    async def ledger_error_handler(request: Request, exc: LedgerAPIError):
        return error_response(exc.detail, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        # Malformed bodies are a plain client error here, not FastAPI's 422
        error = InvalidRequestError(_describe_validation_error(exc))
        return error_response(error.detail, error.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == status.HTTP_405_METHOD_NOT_ALLOWED:
            error = MethodNotAllowedError(request.method)
            return error_response(error.detail, error.status_code)
        return error_response(str(exc.detail), exc.status_code)
