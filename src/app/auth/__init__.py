"""Authentication: session tokens, OAuth login and request dependencies."""

from app.auth.dependencies import (
    CurrentUser,
    OptionalUser,
    UserOrAnonymous,
    get_current_user,
    get_current_user_optional,
    get_current_user_or_anonymous,
)
from app.auth.session import create_session_token, verify_session_token


__all__ = [
    "CurrentUser",
    "OptionalUser",
    "UserOrAnonymous",
    "create_session_token",
    "get_current_user",
    "get_current_user_optional",
    "get_current_user_or_anonymous",
    "verify_session_token",
]
