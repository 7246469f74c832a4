"""Security response headers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


DEFAULT_CSP = (
    "default-src 'self'; "
    "script-src 'self' 'unsafe-inline'; "
    "style-src 'self' 'unsafe-inline'; "
    "img-src 'self' data: https:; "
    "font-src 'self' data:; "
    "connect-src 'self' https:; "
    "frame-ancestors 'none'"
)
DEFAULT_PERMISSIONS_POLICY = "geolocation=(), microphone=(), camera=()"


def is_secure_request(request: Request) -> bool:
    """True when the client connection (or the proxy in front) is HTTPS."""
    return (
        request.url.scheme == "https"
        or request.headers.get("x-forwarded-proto") == "https"
    )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add clickjacking, sniffing, CSP and HSTS headers to responses.

    HSTS is only sent for HTTPS requests. Responses that already set
    ``Cache-Control`` (such as proxied images) keep their value.
    """

    def __init__(
        self,
        app: ASGIApp,
        *,
        content_security_policy: str = DEFAULT_CSP,
        permissions_policy: str = DEFAULT_PERMISSIONS_POLICY,
    ) -> None:
        super().__init__(app)
        self.content_security_policy = content_security_policy
        self.permissions_policy = permissions_policy

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)

        response.headers["X-Frame-Options"] = "DENY"
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-XSS-Protection"] = "1; mode=block"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = self.content_security_policy
        response.headers["Permissions-Policy"] = self.permissions_policy

        if is_secure_request(request):
            response.headers["Strict-Transport-Security"] = (
                "max-age=31536000; includeSubDomains; preload"
            )

        if "cache-control" not in response.headers:
            response.headers["Cache-Control"] = "no-store"

        return response
