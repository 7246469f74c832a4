"""Session endpoints: OAuth callback, current user and logout."""

# Annotations stay evaluated here: the rate-limit decorator wraps endpoints.
from datetime import timedelta
from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from fastapi.responses import RedirectResponse, Response

from app.auth.dependencies import OptionalUser, get_auth_service
from app.auth.exceptions import OAuthError
from app.auth.service import AuthService
from app.cache.rate_limit import rate_limit_auth
from app.core.config import get_settings
from app.core.exceptions import AppException, ValidationException
from app.core.middleware.security_headers import is_secure_request
from app.observability.logging import get_logger
from app.schemas.auth import UserResponse
from app.schemas.base import SuccessResponse


logger = get_logger(__name__)

router = APIRouter(tags=["Auth"])


def set_session_cookie(request: Request, response: Response, token: str) -> None:
    settings = get_settings()
    response.set_cookie(
        settings.auth.session.cookie_name,
        token,
        max_age=int(timedelta(days=settings.auth.session.expire_days).total_seconds()),
        path="/",
        httponly=True,
        samesite="lax",
        secure=is_secure_request(request),
    )


@router.get(
    "/oauth/callback",
    status_code=status.HTTP_302_FOUND,
    summary="Complete an OAuth login",
    responses={400: {"description": "Missing code/state or openId"}},
)
@rate_limit_auth()
async def oauth_callback(
    request: Request,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
    code: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """Exchange the code, set the session cookie and redirect to ``/``."""
    if not code or not state:
        raise ValidationException("code and state are required")

    try:
        _, session_token = await auth_service.complete_oauth_login(code, state)
    except OAuthError as e:
        logger.warning("OAuth callback failed", error=str(e))
        if e.status_code == status.HTTP_400_BAD_REQUEST:
            raise ValidationException("openId missing from user info") from None
        raise AppException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="OAUTH_ERROR",
            message="OAuth callback failed",
        ) from None

    response = RedirectResponse(url="/", status_code=status.HTTP_302_FOUND)
    set_session_cookie(request, response, session_token)
    return response


@router.get("/auth/me", response_model=UserResponse | None, summary="Current user")
async def me(user: OptionalUser) -> UserResponse | None:
    return UserResponse.model_validate(user) if user else None


@router.post("/auth/logout", response_model=SuccessResponse, summary="Log out")
async def logout(request: Request, response: Response) -> SuccessResponse:
    """Clear the session cookie."""
    response.delete_cookie(
        get_settings().auth.session.cookie_name,
        path="/",
        httponly=True,
        samesite="lax",
        secure=is_secure_request(request),
    )
    return SuccessResponse()
