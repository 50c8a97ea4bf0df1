"""
Middleware configuration for the application.
Includes Correlation ID setup and request logging middleware.
"""

import time
from typing import Callable

import structlog
from asgi_correlation_id import CorrelationIdMiddleware
from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger(__name__)


def _elapsed_ms(start_time: float) -> float:
    return round((time.perf_counter() - start_time) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request once on the way in and once on the way out.

    Method and path are bound to the structlog context for the duration of the
    request, so account events logged by the services carry them too.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            method=request.method,
            path=request.url.path,
        )

        logger.info(
            "Request started",
            client_ip=request.client.host if request.client else "unknown",
        )

        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Request failed", process_time_ms=_elapsed_ms(start_time))
            raise

        log = logger.warning if response.status_code >= 500 else logger.info
        log(
            "Request completed",
            status_code=response.status_code,
            process_time_ms=_elapsed_ms(start_time),
        )
        structlog.contextvars.clear_contextvars()
        return response


def setup_middleware(app: FastAPI) -> None:
    """Setup all middleware for the application."""

    # Starlette runs the last added middleware first, so the correlation id
    # is added last to wrap request logging.
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CorrelationIdMiddleware,
        header_name="X-Request-ID",
        update_request_header=True,
    )
