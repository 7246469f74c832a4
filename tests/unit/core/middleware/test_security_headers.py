"""Unit tests for security headers middleware."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.responses import Response
from fastapi.testclient import TestClient

from app.core.middleware import SecurityHeadersMiddleware
from app.core.middleware.security_headers import DEFAULT_CSP


pytestmark = pytest.mark.unit


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)

    @app.get("/json")
    async def json() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/image")
    async def image() -> Response:
        return Response(
            b"\x89PNG", media_type="image/png", headers={"Cache-Control": "public, max-age=60"}
        )

    return TestClient(app)


class TestSecurityHeaders:
    """Tests for added response headers."""

    def test_standard_headers(self, client: TestClient) -> None:
        headers = client.get("/json").headers

        assert headers["X-Frame-Options"] == "DENY"
        assert headers["X-Content-Type-Options"] == "nosniff"
        assert headers["Referrer-Policy"] == "strict-origin-when-cross-origin"
        assert headers["Content-Security-Policy"] == DEFAULT_CSP
        assert headers["Cache-Control"] == "no-store"

    def test_no_hsts_over_http(self, client: TestClient) -> None:
        assert "Strict-Transport-Security" not in client.get("/json").headers

    def test_hsts_behind_https_proxy(self, client: TestClient) -> None:
        headers = client.get("/json", headers={"X-Forwarded-Proto": "https"}).headers

        assert headers["Strict-Transport-Security"].startswith("max-age=31536000")

    def test_keeps_existing_cache_control(self, client: TestClient) -> None:
        headers = client.get("/image").headers

        assert headers["Cache-Control"] == "public, max-age=60"
