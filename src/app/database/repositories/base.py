"""Shared repository plumbing."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.database.connection import get_database_pool


if TYPE_CHECKING:
    from asyncpg import Pool


class BaseRepository:
    """Repository bound to an asyncpg pool.

    When no pool is passed, the process-wide pool is resolved on each use so
    repositories can be created before the lifespan has run.
    """

    def __init__(self, pool: Pool | None = None) -> None:
        self._pool = pool

    @property
    def pool(self) -> Pool:
        """Get the database connection pool."""
        if self._pool is not None:
            return self._pool
        return get_database_pool()
