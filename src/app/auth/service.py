"""Resolve request credentials to user accounts.

Bearer tokens are checked first. A bearer value that verifies as a session
token resolves its ``openId``; any other bearer value is taken as a raw open
id, which is how the mobile app signs in. Browsers send the session cookie
instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.auth.exceptions import InvalidSessionError, OAuthError
from app.auth.session import create_session_token, verify_session_token
from app.core.config import get_settings
from app.database.repositories.users import User, UserRepository, UserRole
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import Request

    from app.auth.oauth import OAuthClient


logger = get_logger(__name__)

BEARER_LOGIN_METHOD = "mobile-bearer"
SESSION_LOGIN_METHOD = "oauth"


def get_bearer_token(request: Request) -> str | None:
    """Return the token from ``Authorization: Bearer ...``, if present."""
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token.strip() or None


class AuthService:
    """Authenticate requests and complete OAuth logins."""

    def __init__(
        self,
        users: UserRepository | None = None,
        oauth_client: OAuthClient | None = None,
    ) -> None:
        self._settings = get_settings()
        self._users = users or UserRepository()
        self._oauth_client = oauth_client

    def _role_for(self, open_id: str) -> UserRole | None:
        owner = self._settings.auth.owner_open_id
        return UserRole.ADMIN if owner and open_id == owner else None

    async def authenticate_request(self, request: Request) -> User | None:
        """Resolve the caller, or ``None`` when no credentials were sent.

        Raises:
            InvalidSessionError: A session cookie was sent but does not verify.
        """
        token = get_bearer_token(request)
        if token:
            return await self.authenticate_bearer(token)

        cookie = request.cookies.get(self._settings.auth.session.cookie_name)
        if cookie:
            return await self.authenticate_session_cookie(cookie)
        return None

    async def authenticate_bearer(self, token: str) -> User:
        session = verify_session_token(token)
        if session is not None:
            return await self._sign_in(
                session.open_id, name=session.name, login_method=SESSION_LOGIN_METHOD
            )

        name, at, _ = token.partition("@")
        return await self._sign_in(
            token,
            name=name if at else token,
            email=token if at else None,
            login_method=BEARER_LOGIN_METHOD,
        )

    async def authenticate_session_cookie(self, cookie: str) -> User:
        session = verify_session_token(cookie)
        if session is None:
            raise InvalidSessionError("Invalid session cookie")
        return await self._sign_in(
            session.open_id, name=session.name, login_method=SESSION_LOGIN_METHOD
        )

    async def _sign_in(
        self,
        open_id: str,
        *,
        name: str | None,
        login_method: str,
        email: str | None = None,
    ) -> User:
        user = await self._users.get_by_open_id(open_id)
        if user is None:
            logger.info("Creating user on first sign-in", login_method=login_method)
            return await self._users.upsert(
                open_id,
                name=name,
                email=email,
                login_method=login_method,
                role=self._role_for(open_id),
            )
        await self._users.touch_last_signed_in(user.id)
        return user

    async def get_anonymous_user(self) -> User:
        """Return the shared anonymous account, creating it on first use."""
        open_id = self._settings.auth.anonymous_open_id
        user = await self._users.get_by_open_id(open_id)
        if user is not None:
            return user
        return await self._users.upsert(
            open_id, name="Anonymous User", login_method="anonymous"
        )

    async def complete_oauth_login(self, code: str, state: str) -> tuple[User, str]:
        """Exchange an OAuth code, upsert the user and issue a session token.

        Raises:
            OAuthError: The exchange failed or returned no ``openId``.
        """
        if self._oauth_client is None:
            msg = "OAuth client is not available"
            raise OAuthError(msg)

        token = await self._oauth_client.exchange_code(code, state)
        info = await self._oauth_client.get_user_info(token.access_token)
        if not info.open_id:
            msg = "openId missing from user info"
            raise OAuthError(msg, status_code=400)

        user = await self._users.upsert(
            info.open_id,
            name=info.name,
            email=info.email,
            login_method=info.login_method,
            role=self._role_for(info.open_id),
        )
        session_token = create_session_token(
            info.open_id, name=info.name or info.open_id
        )
        logger.info("OAuth login completed", user_id=user.id)
        return user, session_token
