"""Pydantic schemas for request/response validation.

Feature schemas live in their own modules (``app.schemas.recipes``,
``app.schemas.billing`` and so on); the shared bases are re-exported here.
"""

from app.schemas.base import (
    APIRequest,
    APIResponse,
    DownstreamRequest,
    DownstreamResponse,
    IdResponse,
    SuccessResponse,
)
from app.schemas.health import (
    HealthCheckItem,
    HealthResponse,
    HealthStatus,
    ReadinessResponse,
)


__all__ = [
    "APIRequest",
    "APIResponse",
    "DownstreamRequest",
    "DownstreamResponse",
    "HealthCheckItem",
    "HealthResponse",
    "HealthStatus",
    "IdResponse",
    "ReadinessResponse",
    "SuccessResponse",
]
