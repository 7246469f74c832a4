"""Unit tests for rate limiting."""

from __future__ import annotations

from unittest.mock import MagicMock

import orjson
import pytest
from fastapi import FastAPI
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from app.cache.rate_limit import (
    _get_auth_rate_limit_key,
    _get_rate_limit_key,
    create_limiter,
    rate_limit_exceeded_handler,
    setup_rate_limiting,
)


pytestmark = pytest.mark.unit


def _request(user: object | None = None, request_id: str | None = None) -> Request:
    request = Request(
        {
            "type": "http",
            "method": "POST",
            "path": "/api/v1/recipes/parse-url",
            "headers": [],
            "client": ("203.0.113.5", 4000),
        }
    )
    if user is not None:
        request.state.user = user
    if request_id is not None:
        request.state.request_id = request_id
    return request


class TestKeys:
    def test_user_key(self) -> None:
        user = MagicMock()
        user.id = 7

        assert _get_rate_limit_key(_request(user)) == "user:7"

    def test_ip_key(self) -> None:
        assert _get_rate_limit_key(_request()) == "203.0.113.5"

    def test_auth_key(self) -> None:
        assert _get_auth_rate_limit_key(_request()) == "auth:203.0.113.5"


class TestLimiter:
    def test_disabled_under_test(self) -> None:
        limiter = create_limiter()

        assert limiter.enabled is False


class TestExceededHandler:
    async def test_renders_429(self) -> None:
        limit = MagicMock()
        limit.error_message = None
        limit.limit = "5 per 1 minute"
        exc = RateLimitExceeded(limit)

        response = await rate_limit_exceeded_handler(_request(request_id="req-9"), exc)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == "60"
        body = orjson.loads(response.body)
        assert body["error"] == "RATE_LIMIT_EXCEEDED"
        assert body["request_id"] == "req-9"


class TestSetup:
    def test_registers_limiter_and_handler(self) -> None:
        app = FastAPI()

        setup_rate_limiting(app)

        assert app.state.limiter is not None
        assert RateLimitExceeded in app.exception_handlers
