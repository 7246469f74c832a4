"""Unit tests for authentication dependencies."""

from __future__ import annotations

from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starlette.requests import Request

from app.auth.dependencies import (
    get_auth_service,
    get_current_user,
    get_current_user_optional,
    get_current_user_or_anonymous,
)
from app.auth.exceptions import InvalidSessionError
from app.core.config import Settings
from app.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ServiceUnavailableException,
)
from app.database.repositories.users import User


pytestmark = pytest.mark.unit


@pytest.fixture
def auth_service() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def request_(make_request: Callable[..., Request]) -> Request:
    return make_request()


class TestGetAuthService:
    def test_from_app_state(self) -> None:
        request = MagicMock()
        request.app.state.auth_service = "svc"

        assert get_auth_service(request) == "svc"

    def test_missing(self) -> None:
        request = MagicMock()
        request.app.state = MagicMock(spec=[])

        with pytest.raises(ServiceUnavailableException):
            get_auth_service(request)


class TestGetCurrentUserOptional:
    """Tests for the optional dependency."""

    async def test_returns_user(
        self, request_: Request, auth_service: AsyncMock, user: User
    ) -> None:
        auth_service.authenticate_request.return_value = user

        assert await get_current_user_optional(request_, auth_service) is user
        assert request_.state.user is user

    async def test_ignores_bad_credentials(
        self, request_: Request, auth_service: AsyncMock
    ) -> None:
        """Should treat invalid credentials as anonymous."""
        auth_service.authenticate_request.side_effect = InvalidSessionError("bad")

        assert await get_current_user_optional(request_, auth_service) is None


class TestGetCurrentUser:
    """Tests for the required dependency."""

    async def test_returns_user(
        self, request_: Request, auth_service: AsyncMock, user: User
    ) -> None:
        auth_service.authenticate_request.return_value = user

        assert await get_current_user(request_, auth_service) is user

    async def test_no_credentials(self, request_: Request, auth_service: AsyncMock) -> None:
        auth_service.authenticate_request.return_value = None

        with pytest.raises(AuthenticationException):
            await get_current_user(request_, auth_service)

    async def test_bad_cookie(self, request_: Request, auth_service: AsyncMock) -> None:
        """Should answer 403 for a session cookie that does not verify."""
        auth_service.authenticate_request.side_effect = InvalidSessionError("bad")

        with pytest.raises(AuthorizationException):
            await get_current_user(request_, auth_service)


class TestGetCurrentUserOrAnonymous:
    """Tests for the anonymous fallback."""

    async def test_prefers_caller(
        self, request_: Request, auth_service: AsyncMock, user: User
    ) -> None:
        assert await get_current_user_or_anonymous(request_, auth_service, user) is user
        auth_service.get_anonymous_user.assert_not_awaited()

    async def test_falls_back(
        self, request_: Request, auth_service: AsyncMock, other_user: User
    ) -> None:
        auth_service.get_anonymous_user.return_value = other_user

        assert await get_current_user_or_anonymous(request_, auth_service, None) is other_user

    async def test_fallback_disabled(
        self, request_: Request, auth_service: AsyncMock
    ) -> None:
        settings = Settings(APP_ENV="test", auth={"anonymous_fallback": False})

        with (
            patch("app.auth.dependencies.get_settings", return_value=settings),
            pytest.raises(AuthenticationException),
        ):
            await get_current_user_or_anonymous(request_, auth_service, None)
