"""
Bounded request execution.

Every route in the API runs through BoundedRequestExecutor, which guarantees
that a request gets exactly one response within a fixed wall-clock budget,
whatever the handler does (hang, crash, wait on a slow database).

How a request flows:

    route handler ──spawn──> handler task ──deliver()──> PendingCall slot
         │                                                    │
         └──────── wait on slot, at most `timeout` seconds ───┘

  1. The handler is started as its own asyncio task, so the request
     coroutine is never blocked by it.
  2. The task hands its outcome, a result or an exception, to a PendingCall:
     a single-slot future that accepts at most one delivery.
  3. The request coroutine waits on the slot for at most `timeout` seconds.
     Exactly one of three things happens:
       - a result arrives         -> 200 with the JSON result
       - an error arrives         -> the error's own status + {"error": ...}
       - the deadline passes      -> 408 + {"error": "request timed out"}
  4. On timeout the task is abandoned, NOT cancelled. The PendingCall is
     marked abandoned first, so when the task eventually finishes its
     delivery is refused and the late outcome is dropped. It can never
     produce a second response.

Abandoned tasks are held in a module-level set until they finish; asyncio
only keeps weak references to tasks, so this keeps them from being garbage
collected mid-flight. They end when whatever I/O they're doing completes.

Nothing here retries. A handler's status code is never reinterpreted;
the executor only supplies its own for the timeout case.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

from fastapi import Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.routing import APIRoute
from starlette.exceptions import HTTPException as StarletteHTTPException

from ledger_api.config import settings
from ledger_api.exceptions import LedgerAPIError, RequestTimeoutError, make_api_error
from ledger_api.responses import error_response, write_json

logger = logging.getLogger(__name__)

Handler = Callable[[], Awaitable[Any]]

# Handler tasks that are still running, including abandoned ones
_inflight: set[asyncio.Task] = set()


class PendingCall:
    """
    The outcome channel for one request.

    Holds a single slot written at most once (by the handler task) and read
    at most once (by the executor). Once the executor gives up on the call,
    the slot refuses any further delivery.
    """

    def __init__(self) -> None:
        self._slot: asyncio.Future = asyncio.get_running_loop().create_future()
        self._abandoned = False
        self._responded = False

    @property
    def abandoned(self) -> bool:
        return self._abandoned

    def deliver(self, result: Any = None, error: BaseException | None = None) -> bool:
        """
        Hand over the handler's outcome.

        Returns False, and drops the outcome, if the slot is already filled
        or the call has been abandoned.
        """
        if self._abandoned or self._slot.done():
            return False
        self._slot.set_result((result, error))
        return True

    async def wait(self, timeout: float) -> tuple[Any, BaseException | None]:
        """
        Wait up to ``timeout`` seconds for the outcome.

        Raises asyncio.TimeoutError when the deadline passes first. The slot
        itself is shielded, so giving up on the wait doesn't cancel it.
        """
        return await asyncio.wait_for(asyncio.shield(self._slot), timeout)

    def abandon(self) -> None:
        """Stop accepting deliveries; any later outcome is discarded."""
        self._abandoned = True

    def claim(self) -> bool:
        """
        Mark the response as written.

        Returns False if it already was, in which case the caller must not
        write anything.
        """
        if self._responded:
            return False
        self._responded = True
        return True


class BoundedRequestExecutor:
    """Runs a handler under a hard deadline and turns its outcome into one response."""

    def __init__(self, timeout: float):
        self.timeout = timeout

    async def run(self, handler: Handler, request_path: str | None = None) -> Response:
        """
        Run ``handler`` and return the single response for this request.

        ``handler`` is a zero-argument coroutine function; it returns a result
        (a Response is passed through untouched, anything else is written as
        200 JSON) or raises.

        ``request_path`` is only used to label log records.

        Framework errors (request validation, HTTPException) are re-raised so
        the application's exception handlers render them. Cancellation of the
        awaiting coroutine abandons the handler the same way a timeout does.
        """
        call = PendingCall()
        task = asyncio.get_running_loop().create_task(self._invoke(handler, call))
        _inflight.add(task)
        task.add_done_callback(_inflight.discard)

        try:
            result, error = await call.wait(self.timeout)
        except asyncio.TimeoutError:
            call.abandon()
            if not call.claim():
                raise RuntimeError("response already written for this request")
            logger.warning(
                "Handler exceeded %.3fs deadline, abandoning it",
                self.timeout,
                extra={"request_path": request_path},
            )
            timeout_error = RequestTimeoutError()
            return error_response(timeout_error.detail, timeout_error.status_code)
        except asyncio.CancelledError:
            call.abandon()
            raise

        if not call.claim():
            raise RuntimeError("response already written for this request")

        if error is not None:
            return self._render_error(error, request_path)
        if isinstance(result, Response):
            return result
        return write_json(result)

    async def _invoke(self, handler: Handler, call: PendingCall) -> None:
        try:
            result = await handler()
        except Exception as exc:
            delivered = call.deliver(error=exc)
        else:
            delivered = call.deliver(result=result)

        if not delivered:
            logger.debug("Discarding outcome of abandoned handler")

    def _render_error(self, error: BaseException, request_path: str | None) -> Response:
        if isinstance(error, (RequestValidationError, StarletteHTTPException)):
            raise error
        if not isinstance(error, LedgerAPIError):
            logger.error(
                "Unhandled error in request handler",
                exc_info=(type(error), error, error.__traceback__),
                extra={"request_path": request_path},
            )
        api_error = make_api_error(error, 500, "internal server error")
        return error_response(api_error.detail, api_error.status_code)


class BoundedRoute(APIRoute):
    """
    APIRoute whose whole handler, dependency resolution included, runs under
    a BoundedRequestExecutor.

    Use it as ``APIRouter(route_class=BoundedRoute)``.
    """

    def get_route_handler(self) -> Callable[[Request], Awaitable[Response]]:
        route_handler = super().get_route_handler()

        async def bounded_route_handler(request: Request) -> Response:
            executor = BoundedRequestExecutor(settings.REQUEST_TIMEOUT_SECONDS)
            return await executor.run(lambda: route_handler(request), request.url.path)

        return bounded_route_handler
