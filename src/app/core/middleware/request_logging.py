"""Request logging and timing middleware."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.observability.logging import bind_context, get_logger


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


logger = get_logger(__name__)

SLOW_REQUEST_THRESHOLD = 1.0  # seconds


def get_client_ip(request: Request) -> str:
    """Best-effort client IP, honoring reverse proxy headers."""
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip
    if request.client:
        return request.client.host
    return "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log each request with its status and duration.

    Adds an ``X-Process-Time`` header and warns on requests slower than
    ``slow_threshold`` seconds.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        exclude_paths: set[str] | None = None,
        header_name: str = "X-Process-Time",
        slow_threshold: float = SLOW_REQUEST_THRESHOLD,
    ) -> None:
        super().__init__(app)
        self.exclude_paths = exclude_paths or set()
        self.header_name = header_name
        self.slow_threshold = slow_threshold

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        log_request = request.url.path not in self.exclude_paths

        if log_request:
            bind_context(
                method=request.method,
                path=request.url.path,
                client_ip=get_client_ip(request),
            )
            logger.info("Request started")

        response = await call_next(request)

        elapsed = time.perf_counter() - start
        elapsed_ms = round(elapsed * 1000, 2)
        response.headers[self.header_name] = f"{elapsed_ms}ms"

        if log_request:
            logger.info(
                "Request completed",
                status_code=response.status_code,
                duration_ms=elapsed_ms,
            )
        if elapsed > self.slow_threshold:
            logger.warning(
                "Slow request detected",
                method=request.method,
                path=request.url.path,
                duration_ms=elapsed_ms,
            )

        return response
