"""
Per-request access logging.

The request id (taken from ``X-Request-ID`` or generated) is bound into
structlog's context variables for the whole request, so ledger, propagation
and store events carry it without passing it around.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from rmc.config import get_logger

logger = get_logger(__name__)

# Probed by load balancers; logged at debug level
PROBE_PATHS = frozenset({"/health", "/api/health"})


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one ``request_handled`` event per request, with timing headers."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex[:12]
        request.state.request_id = request_id
        started = time.perf_counter()

        with structlog.contextvars.bound_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        ):
            try:
                response = await call_next(request)
            except Exception as e:
                logger.error("request_crashed", error=str(e), duration_ms=_elapsed_ms(started))
                raise

            duration_ms = _elapsed_ms(started)
            log = logger.debug if request.url.path in PROBE_PATHS else logger.info
            log("request_handled", status=response.status_code, duration_ms=duration_ms)

        response.headers["X-Request-ID"] = request_id
        response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
        return response
