"""Signed session tokens.

Sessions are HS256 JWTs carrying ``openId``, ``appId`` and ``name`` claims.
The same token is used as the browser session cookie and as a bearer token
by the mobile app.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTError
from pydantic import BaseModel

from app.auth.exceptions import SessionTokenExpiredError, SessionTokenInvalidError
from app.core.config import get_settings
from app.observability.logging import get_logger


logger = get_logger(__name__)


class SessionPayload(BaseModel):
    """Verified session claims."""

    open_id: str
    app_id: str
    name: str


def create_session_token(
    open_id: str,
    *,
    name: str = "",
    expires_delta: timedelta | None = None,
) -> str:
    """Sign a session token for ``open_id``.

    Args:
        open_id: Stable user identifier from the OAuth server.
        name: Display name embedded in the token.
        expires_delta: Lifetime; defaults to ``auth.session.expire_days``.
    """
    settings = get_settings()
    if expires_delta is None:
        expires_delta = timedelta(days=settings.auth.session.expire_days)

    claims = {
        "openId": open_id,
        "appId": settings.auth.app_id,
        "name": name,
        "exp": datetime.now(UTC) + expires_delta,
    }
    return jwt.encode(
        claims,
        settings.JWT_SECRET_KEY,
        algorithm=settings.auth.session.algorithm,
    )


def decode_session_token(token: str) -> SessionPayload:
    """Verify a session token and return its claims.

    Raises:
        SessionTokenExpiredError: If the token has expired.
        SessionTokenInvalidError: If the signature is bad or a claim is
            missing or empty.
    """
    settings = get_settings()
    try:
        claims = jwt.decode(
            token,
            settings.JWT_SECRET_KEY,
            algorithms=[settings.auth.session.algorithm],
        )
    except ExpiredSignatureError:
        raise SessionTokenExpiredError("Session token has expired") from None
    except JWTError as e:
        raise SessionTokenInvalidError(str(e)) from None

    values = [claims.get(key) for key in ("openId", "appId", "name")]
    if not all(isinstance(v, str) and v for v in values):
        raise SessionTokenInvalidError("Session payload missing required fields")

    open_id, app_id, name = values
    return SessionPayload(open_id=open_id, app_id=app_id, name=name)


def verify_session_token(token: str | None) -> SessionPayload | None:
    """Like ``decode_session_token`` but returns ``None`` on any failure."""
    if not token:
        return None
    try:
        return decode_session_token(token)
    except SessionTokenExpiredError:
        logger.debug("Session token expired")
    except SessionTokenInvalidError as e:
        logger.debug("Session token rejected", reason=str(e))
    return None
