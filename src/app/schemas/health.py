"""Liveness and readiness schemas."""

from __future__ import annotations

from datetime import UTC, datetime
from enum import StrEnum

from pydantic import Field

from app.schemas.base import APIResponse


class HealthStatus(StrEnum):
    OK = "ok"
    DEGRADED = "degraded"
    ERROR = "error"


class HealthCheckItem(APIResponse):
    """Result of checking one dependency."""

    status: str = Field(..., description="healthy, unhealthy or not_initialized")
    response_time_ms: float | None = None


class HealthResponse(APIResponse):
    status: HealthStatus = HealthStatus.OK
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))
    version: str
    environment: str


class ReadinessResponse(HealthResponse):
    """Readiness with per-dependency results.

    ``ok`` when every check is healthy, ``error`` when the database is
    down, ``degraded`` otherwise.
    """

    checks: dict[str, HealthCheckItem] = Field(default_factory=dict)
