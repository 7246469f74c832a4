"""Rate limiting using SlowAPI with a Redis backend."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from app.core.config import get_settings
from app.core.exceptions import ErrorResponse
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI
    from starlette.requests import Request

logger = get_logger(__name__)


def _get_rate_limit_key(request: Request) -> str:
    """Key by authenticated user when known, otherwise by client IP."""
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.id}"
    return str(get_remote_address(request))


def _get_auth_rate_limit_key(request: Request) -> str:
    return f"auth:{get_remote_address(request)}"


def create_limiter() -> Limiter:
    """Create the process-wide limiter."""
    settings = get_settings()
    return Limiter(
        key_func=_get_rate_limit_key,
        default_limits=[settings.rate_limiting.default],
        storage_uri=settings.redis_rate_limit_url,
        strategy="fixed-window",
        headers_enabled=True,
        enabled=not settings.is_testing,
    )


limiter = create_limiter()


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """Render ``RateLimitExceeded`` as a 429 ``ErrorResponse``."""
    assert isinstance(exc, RateLimitExceeded)
    logger.warning(
        "Rate limit exceeded",
        path=request.url.path,
        client_ip=get_remote_address(request),
        limit=str(exc.detail),
    )
    return ORJSONResponse(
        status_code=429,
        content=ErrorResponse(
            error="RATE_LIMIT_EXCEEDED",
            message="Too many requests, please try again later",
            request_id=getattr(request.state, "request_id", None),
        ).model_dump(),
        headers={"Retry-After": "60"},
    )


def setup_rate_limiting(app: FastAPI) -> None:
    """Attach the limiter, its 429 handler and the default-limit middleware."""
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)
    logger.info("Rate limiting configured")


def rate_limit(limit: str) -> Any:
    """Apply a custom limit (e.g. ``"10/minute"``) to an endpoint.

    The decorated endpoint must accept a ``request: Request`` argument.
    """
    return limiter.limit(limit)


def rate_limit_auth() -> Any:
    """Stricter IP-keyed limit for login endpoints."""
    return limiter.limit(
        get_settings().rate_limiting.auth, key_func=_get_auth_rate_limit_key
    )
