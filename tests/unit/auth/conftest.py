"""Auth test fixtures."""

from __future__ import annotations

from collections.abc import Callable

import pytest
from starlette.requests import Request


JWT_SECRET = "unit-test-secret"


@pytest.fixture(autouse=True)
def jwt_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    """Give every auth test a signing key."""
    monkeypatch.setenv("JWT_SECRET_KEY", JWT_SECRET)
    return JWT_SECRET


@pytest.fixture
def make_request() -> Callable[..., Request]:
    """Build a bare HTTP request carrying the given headers."""

    def _make(headers: dict[str, str] | None = None) -> Request:
        raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
        return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})

    return _make
