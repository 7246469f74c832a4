"""Application error hierarchy and FastAPI exception handlers.

Every error that reaches a client is rendered as an ``ErrorResponse``
carrying a stable machine-readable ``error`` code. Services raise their own
domain exceptions; endpoints translate them into one of the ``AppException``
subclasses below.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import Request


logger = get_logger(__name__)


class ErrorDetail(BaseModel):
    """Structured error detail for validation errors."""

    code: str
    message: str
    field: str | None = None


class ErrorResponse(BaseModel):
    """Structured error response."""

    error: str
    message: str
    details: list[ErrorDetail] | None = None
    request_id: str | None = None


class AppException(Exception):
    """Base application exception."""

    def __init__(
        self,
        status_code: int,
        error: str,
        message: str,
        details: list[ErrorDetail] | None = None,
    ) -> None:
        self.status_code = status_code
        self.error = error
        self.message = message
        self.details = details
        super().__init__(message)


class ValidationException(AppException):
    """Input failed a business validation rule."""

    def __init__(
        self, message: str, details: list[ErrorDetail] | None = None
    ) -> None:
        super().__init__(
            status_code=status.HTTP_400_BAD_REQUEST,
            error="VALIDATION_ERROR",
            message=message,
            details=details,
        )


class AuthenticationException(AppException):
    """Caller is not authenticated."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            error="AUTHENTICATION_ERROR",
            message=message,
        )


class AuthorizationException(AppException):
    """Caller may not access the resource."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(
            status_code=status.HTTP_403_FORBIDDEN,
            error="AUTHORIZATION_ERROR",
            message=message,
        )


class NotFoundException(AppException):
    """Resource not found exception."""

    def __init__(self, resource: str, message: str | None = None) -> None:
        self.resource = resource
        super().__init__(
            status_code=status.HTTP_404_NOT_FOUND,
            error="NOT_FOUND",
            message=message or f"{resource} not found",
        )


class ConflictException(AppException):
    """Resource conflict exception."""

    def __init__(self, message: str) -> None:
        super().__init__(
            status_code=status.HTTP_409_CONFLICT,
            error="CONFLICT",
            message=message,
        )


class RateLimitException(AppException):
    """Rate limit exceeded exception."""

    def __init__(self, message: str = "Too many requests") -> None:
        super().__init__(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            error="RATE_LIMIT_EXCEEDED",
            message=message,
        )


class DatabaseException(AppException):
    """A database operation failed."""

    def __init__(self, message: str = "Database operation failed") -> None:
        super().__init__(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            error="DATABASE_ERROR",
            message=message,
        )


class ExternalServiceException(AppException):
    """A third-party dependency failed."""

    def __init__(self, service: str, message: str | None = None) -> None:
        self.service = service
        super().__init__(
            status_code=status.HTTP_502_BAD_GATEWAY,
            error="EXTERNAL_SERVICE_ERROR",
            message=message or f"External service {service} is unavailable",
        )


class ServiceUnavailableException(AppException):
    """A required local dependency is not configured or not running."""

    def __init__(self, message: str = "Service temporarily unavailable") -> None:
        super().__init__(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error="SERVICE_UNAVAILABLE",
            message=message,
        )


def _get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    message: str,
    details: list[ErrorDetail] | None = None,
) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            message=message,
            details=details,
            request_id=_get_request_id(request),
        ).model_dump(),
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """Register exception handlers with the FastAPI application."""

    @app.exception_handler(AppException)
    async def app_exception_handler(
        request: Request,
        exc: AppException,
    ) -> ORJSONResponse:
        if exc.status_code >= status.HTTP_500_INTERNAL_SERVER_ERROR:
            logger.warning(
                "Request failed",
                error=exc.error,
                error_message=exc.message,
                status_code=exc.status_code,
            )
        return _error_response(
            request, exc.status_code, exc.error, exc.message, exc.details
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException,
    ) -> ORJSONResponse:
        if isinstance(exc.detail, dict):
            return _error_response(
                request,
                exc.status_code,
                str(exc.detail.get("error", "HTTP_ERROR")),
                str(exc.detail.get("message", "")),
            )
        return _error_response(request, exc.status_code, "HTTP_ERROR", str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError,
    ) -> ORJSONResponse:
        details = [
            ErrorDetail(
                code="VALIDATION_ERROR",
                message=error["msg"],
                field=".".join(str(loc) for loc in error["loc"]),
            )
            for error in exc.errors()
        ]
        return _error_response(
            request,
            status.HTTP_422_UNPROCESSABLE_ENTITY,
            "VALIDATION_ERROR",
            "Request validation failed",
            details,
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request,
        exc: Exception,
    ) -> ORJSONResponse:
        logger.opt(exception=exc).error("Unhandled exception")
        return _error_response(
            request,
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "INTERNAL_SERVER_ERROR",
            "An unexpected error occurred",
        )
