"""Unit tests for database connection module.

Tests cover:
- Connection pool initialization
- Connection pool closing
- Pool getter
- Health checks
"""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock, patch

import asyncpg
import pytest

import app.database.connection as db_module
from app.database.connection import (
    SCHEMA_PATH,
    check_database_health,
    close_database_pool,
    get_database_pool,
    init_database_pool,
    is_database_available,
)


pytestmark = pytest.mark.unit


@pytest.fixture
def mock_settings() -> MagicMock:
    settings = MagicMock()
    settings.database.host = "localhost"
    settings.database.port = 5432
    settings.database.name = "kitchen"
    settings.database.user = "postgres"
    settings.database.min_pool_size = 1
    settings.database.max_pool_size = 5
    settings.database.command_timeout = 30.0
    settings.database.ssl = False
    settings.database.apply_schema = False
    settings.DATABASE_PASSWORD = ""
    return settings


class TestGetDatabasePool:
    """Tests for get_database_pool function."""

    def test_raises_when_not_initialized(self) -> None:
        """Should raise RuntimeError when pool not initialized."""
        with pytest.raises(RuntimeError, match="not initialized"):
            get_database_pool()

        assert is_database_available() is False

    def test_returns_pool_when_initialized(self, mock_pool: MagicMock) -> None:
        db_module._pool = mock_pool

        assert get_database_pool() is mock_pool
        assert is_database_available() is True


class TestInitDatabasePool:
    """Tests for init_database_pool function."""

    async def test_creates_and_verifies_pool(
        self, mock_settings: MagicMock, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should create the pool and run SELECT 1."""
        with (
            patch("app.database.connection.get_settings", return_value=mock_settings),
            patch(
                "app.database.connection.asyncpg.create_pool",
                new_callable=AsyncMock,
                return_value=mock_pool,
            ) as create_pool,
        ):
            await init_database_pool()

        assert db_module._pool is mock_pool
        mock_conn.fetchval.assert_awaited_once_with("SELECT 1")
        mock_conn.execute.assert_not_awaited()
        kwargs = create_pool.call_args.kwargs
        assert kwargs["database"] == "kitchen"
        assert kwargs["password"] is None
        assert kwargs["ssl"] is None

    async def test_applies_schema(
        self, mock_settings: MagicMock, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        """Should run schema.sql when apply_schema is enabled."""
        mock_settings.database.apply_schema = True

        with (
            patch("app.database.connection.get_settings", return_value=mock_settings),
            patch(
                "app.database.connection.asyncpg.create_pool",
                new_callable=AsyncMock,
                return_value=mock_pool,
            ),
        ):
            await init_database_pool()

        mock_conn.execute.assert_awaited_once_with(SCHEMA_PATH.read_text(encoding="utf-8"))

    async def test_propagates_connection_failure(
        self, mock_settings: MagicMock, mock_pool: MagicMock, mock_conn: AsyncMock
    ) -> None:
        mock_conn.fetchval.side_effect = asyncpg.PostgresError("refused")

        with (
            patch("app.database.connection.get_settings", return_value=mock_settings),
            patch(
                "app.database.connection.asyncpg.create_pool",
                new_callable=AsyncMock,
                return_value=mock_pool,
            ),
            pytest.raises(asyncpg.PostgresError),
        ):
            await init_database_pool()


class TestCloseDatabasePool:
    """Tests for close_database_pool function."""

    async def test_closes_pool(self, mock_pool: MagicMock) -> None:
        db_module._pool = mock_pool

        await close_database_pool()

        mock_pool.close.assert_awaited_once()
        assert db_module._pool is None

    async def test_handles_none_pool(self) -> None:
        """Should handle None pool gracefully."""
        await close_database_pool()


class TestCheckDatabaseHealth:
    """Tests for check_database_health function."""

    async def test_healthy(self, mock_pool: MagicMock) -> None:
        db_module._pool = mock_pool

        assert await check_database_health() == {"database": "healthy"}

    async def test_not_initialized(self) -> None:
        assert await check_database_health() == {"database": "not_initialized"}

    async def test_unhealthy_on_error(self, mock_pool: MagicMock, mock_conn: AsyncMock) -> None:
        """Should report unhealthy when the query fails."""
        mock_conn.fetchval.side_effect = OSError("Connection refused")
        db_module._pool = mock_pool

        assert await check_database_health() == {"database": "unhealthy"}
