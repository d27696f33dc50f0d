"""
Request logging middleware.

Binds the request id and the acting user into the structlog context so
ledger and work order events logged deeper in the stack carry them too.
"""

import time
import uuid
from collections.abc import Awaitable, Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.config import bind_request_context, clear_request_context, get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log one start and one outcome event per request, with timing."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex[:8]
        request.state.request_id = request_id

        clear_request_context()
        bind_request_context(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        if acting_user := request.headers.get("X-User-Id"):
            bind_request_context(user_id=acting_user)

        started = time.perf_counter()
        logger.debug("request_started", client=request.client.host if request.client else None)

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                duration_ms=round((time.perf_counter() - started) * 1000, 2),
            )
            raise
        else:
            duration_ms = (time.perf_counter() - started) * 1000
            # client errors are expected traffic (stale versions, short stock)
            log = logger.warning if response.status_code >= 500 else logger.info
            log("request_completed", status=response.status_code, duration_ms=round(duration_ms, 2))
            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            return response
        finally:
            clear_request_context()
