"""Request correlation ids.

Web and mobile clients may send their own ``X-Request-ID``. It is echoed
back only when it looks like an id; anything else (too long, spaces,
control characters) is replaced so it never reaches log lines verbatim.
"""

from __future__ import annotations

import re
import uuid
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from app.observability.logging import bind_context, clear_context


if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.responses import Response
    from starlette.types import ASGIApp


REQUEST_ID_HEADER = "X-Request-ID"

_CLIENT_ID = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def resolve_request_id(incoming: str | None) -> str:
    """Keep a well-formed client id, otherwise mint a UUID4."""
    if incoming and _CLIENT_ID.fullmatch(incoming):
        return incoming
    return str(uuid.uuid4())


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with a correlation id.

    The id lands on ``request.state.request_id`` (error bodies and rate-limit
    logs read it there), in the loguru context and on the response.
    """

    def __init__(self, app: ASGIApp, header_name: str = REQUEST_ID_HEADER) -> None:
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        # Every request starts from an empty log context
        clear_context()

        request_id = resolve_request_id(request.headers.get(self.header_name))
        request.state.request_id = request_id
        bind_context(request_id=request_id)

        response = await call_next(request)
        response.headers.setdefault(self.header_name, request_id)
        return response
