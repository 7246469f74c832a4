"""Authentication exceptions."""

from __future__ import annotations


class AuthError(Exception):
    """Base exception for authentication failures."""


class SessionTokenError(AuthError):
    """A session token could not be verified."""


class SessionTokenExpiredError(SessionTokenError):
    """A session token has expired."""


class SessionTokenInvalidError(SessionTokenError):
    """A session token is malformed, tampered with, or missing claims."""


class InvalidSessionError(AuthError):
    """The request carried credentials that do not resolve to a user."""


class OAuthError(AuthError):
    """The OAuth server rejected a request or was unreachable."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class OAuthNotConfiguredError(OAuthError):
    """No OAuth server URL is configured."""

    def __init__(self) -> None:
        super().__init__("OAuth server URL is not configured")
