"""Shared test fixtures for the kitchen service tests."""

from __future__ import annotations

import os


# Must be set before app modules build settings and the rate limiter
os.environ.setdefault("APP_ENV", "test")

from typing import TYPE_CHECKING  # noqa: E402
from unittest.mock import AsyncMock, MagicMock  # noqa: E402

import pytest  # noqa: E402

from app.core.config import get_settings  # noqa: E402
from tests.factories import UserFactory  # noqa: E402


if TYPE_CHECKING:
    from collections.abc import Generator

    from app.database.repositories.users import User


@pytest.fixture(autouse=True)
def clear_settings_cache() -> Generator[None]:
    """Rebuild settings for every test so env patches take effect."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def user() -> User:
    return UserFactory.build(id=1, open_id="open-1", name="Ada", email="ada@example.com")


@pytest.fixture
def other_user() -> User:
    return UserFactory.build(id=2, open_id="open-2", name="Bob", email="bob@example.com")


@pytest.fixture
def mock_conn() -> AsyncMock:
    """An asyncpg connection with empty results by default."""
    conn = AsyncMock()
    conn.fetchval = AsyncMock(return_value=None)
    conn.fetchrow = AsyncMock(return_value=None)
    conn.fetch = AsyncMock(return_value=[])
    conn.execute = AsyncMock(return_value="OK")
    conn.executemany = AsyncMock(return_value=None)
    conn.transaction = MagicMock(return_value=AsyncMock())
    return conn


@pytest.fixture
def mock_pool(mock_conn: AsyncMock) -> MagicMock:
    """An asyncpg pool whose ``acquire()`` yields ``mock_conn``."""
    pool = MagicMock()
    pool.close = AsyncMock()
    pool.acquire = MagicMock(return_value=AsyncMock())
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=mock_conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=None)
    return pool
