"""Liveness and readiness probes."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import APIRouter, Depends

from app.cache.redis import check_redis_health
from app.core.config import Settings, get_settings
from app.database.connection import check_database_health
from app.schemas.health import (
    HealthCheckItem,
    HealthResponse,
    HealthStatus,
    ReadinessResponse,
)


router = APIRouter(tags=["System"])

HEALTHY = "healthy"


async def _timed(
    check: Callable[[], Awaitable[dict[str, str]]],
) -> dict[str, HealthCheckItem]:
    start = time.perf_counter()
    results = await check()
    elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
    return {
        name: HealthCheckItem(status=status, response_time_ms=elapsed_ms)
        for name, status in results.items()
    }


def overall_status(checks: dict[str, HealthCheckItem]) -> HealthStatus:
    """``error`` if the database is down, ``degraded`` if anything else is."""
    database = checks.get("database")
    if database is None or database.status != HEALTHY:
        return HealthStatus.ERROR
    if any(item.status != HEALTHY for item in checks.values()):
        return HealthStatus.DEGRADED
    return HealthStatus.OK


@router.get("/health", response_model=HealthResponse, summary="Liveness probe")
async def health_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """Report that the process is up; dependencies are not checked."""
    return HealthResponse(version=settings.app.version, environment=settings.APP_ENV)


@router.get("/ready", response_model=ReadinessResponse, summary="Readiness probe")
async def readiness_check(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ReadinessResponse:
    """Check the database and Redis."""
    checks = {
        **await _timed(check_database_health),
        **await _timed(check_redis_health),
    }
    return ReadinessResponse(
        status=overall_status(checks),
        version=settings.app.version,
        environment=settings.APP_ENV,
        checks=checks,
    )
