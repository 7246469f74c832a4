"""FastAPI authentication dependencies.

Three levels are offered:

- ``OptionalUser``: the caller or ``None``; credential errors are ignored.
- ``CurrentUser``: the caller, else 401 (403 for a bad session cookie).
- ``UserOrAnonymous``: the caller, else the shared anonymous account.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.auth.exceptions import AuthError, InvalidSessionError
from app.auth.service import AuthService
from app.core.config import get_settings
from app.core.exceptions import (
    AuthenticationException,
    AuthorizationException,
    ServiceUnavailableException,
)
from app.database.repositories.users import User
from app.observability.logging import bind_context, get_logger


logger = get_logger(__name__)


def get_auth_service(request: Request) -> AuthService:
    """Get the auth service from app state."""
    service: AuthService | None = getattr(request.app.state, "auth_service", None)
    if service is None:
        raise ServiceUnavailableException("Authentication service not available")
    return service


def _remember(request: Request, user: User | None) -> User | None:
    request.state.user = user
    if user is not None:
        bind_context(user_id=user.id)
    return user


async def get_current_user_optional(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User | None:
    """Resolve the caller without failing on bad credentials."""
    try:
        user = await auth_service.authenticate_request(request)
    except AuthError as e:
        logger.debug("Ignoring invalid credentials", reason=str(e))
        user = None
    return _remember(request, user)


async def get_current_user(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> User:
    """Resolve the caller or reject the request."""
    try:
        user = await auth_service.authenticate_request(request)
    except InvalidSessionError:
        raise AuthorizationException("Invalid session cookie") from None
    if user is None:
        raise AuthenticationException("Please login")
    _remember(request, user)
    return user


async def get_current_user_or_anonymous(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    user: Annotated[User | None, Depends(get_current_user_optional)],
) -> User:
    """Resolve the caller, falling back to the anonymous account."""
    if user is not None:
        return user
    if not get_settings().auth.anonymous_fallback:
        raise AuthenticationException("Please login")
    anonymous = await auth_service.get_anonymous_user()
    _remember(request, anonymous)
    return anonymous


OptionalUser = Annotated[User | None, Depends(get_current_user_optional)]
CurrentUser = Annotated[User, Depends(get_current_user)]
UserOrAnonymous = Annotated[User, Depends(get_current_user_or_anonymous)]
