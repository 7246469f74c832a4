"""Database unit test fixtures."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

import app.database.connection as db_module


if TYPE_CHECKING:
    from collections.abc import Generator

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_database_globals() -> Generator[None]:
    """Reset database global state before and after each test."""
    db_module._pool = None
    yield
    db_module._pool = None
