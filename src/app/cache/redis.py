"""Async Redis client lifecycle.

Two logical databases are used by the API process: one for response caching
(LLM completions, scraped pages, TheMealDB lookups) and one for rate limit
counters. The ARQ queue database is managed by ARQ itself.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import redis.asyncio as redis

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = get_logger(__name__)

_cache_client: Redis[Any] | None = None
_rate_limit_client: Redis[Any] | None = None


async def init_redis_pools() -> None:
    """Create the Redis clients and verify connectivity.

    Raises:
        redis.ConnectionError: If Redis cannot be reached.
    """
    global _cache_client, _rate_limit_client  # noqa: PLW0603

    settings = get_settings()
    logger.info(
        "Initializing Redis connections",
        host=settings.redis.host,
        port=settings.redis.port,
    )

    _cache_client = redis.Redis.from_url(
        settings.redis_cache_url,
        max_connections=20,
        decode_responses=True,
    )
    _rate_limit_client = redis.Redis.from_url(
        settings.redis_rate_limit_url,
        max_connections=10,
        decode_responses=True,
    )

    try:
        await _cache_client.ping()
        await _rate_limit_client.ping()
    except redis.ConnectionError:
        logger.exception("Failed to connect to Redis")
        raise
    logger.info("Redis connections established")


async def close_redis_pools() -> None:
    """Close the Redis clients and their pools."""
    global _cache_client, _rate_limit_client  # noqa: PLW0603

    if _cache_client is not None:
        await _cache_client.aclose()
        _cache_client = None
    if _rate_limit_client is not None:
        await _rate_limit_client.aclose()
        _rate_limit_client = None
    logger.info("Redis connections closed")


def get_cache_client() -> Redis[Any]:
    """Return the cache client.

    Raises:
        RuntimeError: If Redis is not initialized.
    """
    if _cache_client is None:
        msg = "Redis cache client not initialized. Call init_redis_pools() first."
        raise RuntimeError(msg)
    return _cache_client


def get_rate_limit_client() -> Redis[Any]:
    """Return the rate limit client.

    Raises:
        RuntimeError: If Redis is not initialized.
    """
    if _rate_limit_client is None:
        msg = "Redis rate limit client not initialized. Call init_redis_pools() first."
        raise RuntimeError(msg)
    return _rate_limit_client


async def check_redis_health() -> dict[str, str]:
    """Ping each client and report ``healthy``, ``unhealthy`` or ``not_initialized``."""
    results: dict[str, str] = {}
    for name, client in (
        ("redis_cache", _cache_client),
        ("redis_rate_limit", _rate_limit_client),
    ):
        if client is None:
            results[name] = "not_initialized"
            continue
        try:
            await client.ping()
            results[name] = "healthy"
        except (redis.ConnectionError, redis.TimeoutError):
            results[name] = "unhealthy"
    return results
