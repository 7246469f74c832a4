"""Client for the external OAuth server."""

from __future__ import annotations

import base64
import binascii
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from app.auth.exceptions import OAuthError, OAuthNotConfiguredError
from app.core.config import get_settings
from app.observability.logging import get_logger


logger = get_logger(__name__)

_PLATFORM_LOGIN_METHODS = (
    ("REGISTERED_PLATFORM_EMAIL", "email"),
    ("REGISTERED_PLATFORM_GOOGLE", "google"),
    ("REGISTERED_PLATFORM_APPLE", "apple"),
    ("REGISTERED_PLATFORM_MICROSOFT", "microsoft"),
    ("REGISTERED_PLATFORM_AZURE", "microsoft"),
    ("REGISTERED_PLATFORM_GITHUB", "github"),
)


class OAuthToken(BaseModel):
    """Token returned by the code exchange."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    access_token: str = Field(alias="accessToken")
    token_type: str | None = Field(default=None, alias="tokenType")
    expires_in: int | None = Field(default=None, alias="expiresIn")


class OAuthUserInfo(BaseModel):
    """User profile returned by the OAuth server."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    open_id: str | None = Field(default=None, alias="openId")
    name: str | None = None
    email: str | None = None
    platform: str | None = None
    platforms: list[str] = Field(default_factory=list)
    login_method: str | None = Field(default=None, alias="loginMethod")


def decode_state(state: str) -> str:
    """Decode the base64 ``state`` parameter into the redirect URI.

    Raises:
        OAuthError: If the state is not valid base64 text.
    """
    try:
        padded = state + "=" * (-len(state) % 4)
        return base64.b64decode(padded, validate=False).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError):
        raise OAuthError("Invalid OAuth state") from None


def derive_login_method(platforms: list[str], fallback: str | None) -> str | None:
    """Map the server's registered platforms to a short login method name."""
    if fallback:
        return fallback
    if not platforms:
        return None
    present = set(platforms)
    for platform, method in _PLATFORM_LOGIN_METHODS:
        if platform in present:
            return method
    return platforms[0].lower()


class OAuthClient:
    """Exchange authorization codes and fetch user info."""

    def __init__(self) -> None:
        self._settings = get_settings()
        self._http_client: httpx.AsyncClient | None = None

    async def initialize(self) -> None:
        """Create the HTTP client if an OAuth server is configured."""
        server_url = self._settings.auth.oauth.server_url
        if not server_url:
            logger.warning("OAuth server URL not configured - OAuth login disabled")
            return
        self._http_client = httpx.AsyncClient(
            base_url=server_url,
            timeout=self._settings.auth.oauth.timeout,
        )
        logger.info("OAuth client initialized", server_url=server_url)

    async def shutdown(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None

    async def exchange_code(self, code: str, state: str) -> OAuthToken:
        """Exchange an authorization code for an access token."""
        payload = {
            "clientId": self._settings.auth.app_id,
            "grantType": "authorization_code",
            "code": code,
            "redirectUri": decode_state(state),
        }
        data = await self._post(self._settings.oauth_token_url, payload)
        return OAuthToken.model_validate(data)

    async def get_user_info(self, access_token: str) -> OAuthUserInfo:
        """Fetch the profile for an access token, normalizing the login method."""
        data = await self._post(
            self._settings.oauth_userinfo_url, {"accessToken": access_token}
        )
        info = OAuthUserInfo.model_validate(data)
        info.login_method = derive_login_method(
            info.platforms, info.login_method or info.platform
        )
        return info

    async def _post(self, url: str | None, payload: dict[str, Any]) -> dict[str, Any]:
        if self._http_client is None or url is None:
            raise OAuthNotConfiguredError
        try:
            response = await self._http_client.post(url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise OAuthError(
                f"OAuth server returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            raise OAuthError(f"OAuth server unreachable: {e}") from e
        return response.json()
