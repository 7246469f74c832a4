"""PostgreSQL connection pool management."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import asyncpg

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Pool

logger = get_logger(__name__)

SCHEMA_PATH = Path(__file__).with_name("schema.sql")

_pool: Pool | None = None


async def init_database_pool() -> None:
    """Create the asyncpg pool, verify it, and optionally apply the schema.

    Raises:
        asyncpg.PostgresError: If the database rejects the connection.
        OSError: If the database host is unreachable.
    """
    global _pool  # noqa: PLW0603

    settings = get_settings()
    logger.info(
        "Initializing database connection pool",
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
    )

    _pool = await asyncpg.create_pool(
        host=settings.database.host,
        port=settings.database.port,
        database=settings.database.name,
        user=settings.database.user,
        password=settings.DATABASE_PASSWORD or None,
        min_size=settings.database.min_pool_size,
        max_size=settings.database.max_pool_size,
        command_timeout=settings.database.command_timeout,
        ssl=True if settings.database.ssl else None,
    )

    try:
        assert _pool is not None
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
            if settings.database.apply_schema:
                await conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))
                logger.info("Database schema applied")
    except asyncpg.PostgresError:
        logger.exception("Failed to connect to database")
        raise
    logger.info("Database connection established")


async def close_database_pool() -> None:
    """Close the pool if it is open."""
    global _pool  # noqa: PLW0603

    if _pool is not None:
        await _pool.close()
        _pool = None
    logger.info("Database connection pool closed")


def get_database_pool() -> Pool:
    """Return the pool.

    Raises:
        RuntimeError: If the pool is not initialized.
    """
    if _pool is None:
        msg = "Database pool not initialized. Call init_database_pool() first."
        raise RuntimeError(msg)
    return _pool


def is_database_available() -> bool:
    """True once the pool has been initialized."""
    return _pool is not None


async def check_database_health() -> dict[str, str]:
    """Report ``healthy``, ``unhealthy`` or ``not_initialized`` for the pool."""
    if _pool is None:
        return {"database": "not_initialized"}
    try:
        async with _pool.acquire() as conn:
            await conn.fetchval("SELECT 1")
    except (asyncpg.PostgresError, OSError):
        logger.warning("Database health check failed")
        return {"database": "unhealthy"}
    return {"database": "healthy"}
