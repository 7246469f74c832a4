"""Unit tests for job enqueue utilities."""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import app.workers.jobs as jobs_module
from app.workers.jobs import (
    close_arq_pool,
    enqueue_cook_nudge,
    enqueue_job,
    enqueue_push_notification,
    get_arq_pool,
)


if TYPE_CHECKING:
    from collections.abc import Generator


pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def reset_arq_pool() -> Generator[None]:
    """Reset the global ARQ pool before and after each test."""
    jobs_module._arq_pool = None
    yield
    jobs_module._arq_pool = None


@pytest.fixture
def mock_pool() -> AsyncMock:
    pool = AsyncMock()
    job = MagicMock()
    job.job_id = "job-1"
    pool.enqueue_job = AsyncMock(return_value=job)
    jobs_module._arq_pool = pool
    return pool


class TestPool:
    """Tests for pool creation and teardown."""

    async def test_creates_pool_once(self) -> None:
        pool = AsyncMock()

        with (
            patch("app.workers.jobs.create_pool", return_value=pool) as mock_create,
            patch("app.workers.jobs.get_redis_settings"),
        ):
            first = await get_arq_pool()
            second = await get_arq_pool()

        mock_create.assert_called_once()
        assert first is second is pool

    async def test_close(self, mock_pool: AsyncMock) -> None:
        await close_arq_pool()

        mock_pool.close.assert_awaited_once()
        assert jobs_module._arq_pool is None

    async def test_close_without_pool(self) -> None:
        await close_arq_pool()

        assert jobs_module._arq_pool is None


class TestEnqueue:
    """Tests for enqueue helpers."""

    async def test_enqueue_job(self, mock_pool: AsyncMock) -> None:
        job = await enqueue_job("task", "a", key="b")

        assert job.job_id == "job-1"
        mock_pool.enqueue_job.assert_awaited_once_with(
            "task", "a", _job_id=None, _queue_name="kitchen:queue:jobs", key="b"
        )

    async def test_redis_down_returns_none(self) -> None:
        """Should swallow enqueue failures so callers can continue."""
        with patch(
            "app.workers.jobs.get_arq_pool",
            new_callable=AsyncMock,
            side_effect=ConnectionError("refused"),
        ):
            assert await enqueue_job("task") is None

    async def test_push_notification(self, mock_pool: AsyncMock) -> None:
        await enqueue_push_notification("tok", "Title", "Body", {"screen": "Home"})

        args = mock_pool.enqueue_job.call_args.args
        assert args == ("send_push_notification", "tok", "Title", "Body", {"screen": "Home"})

    async def test_cook_nudge_uses_fixed_job_id(self, mock_pool: AsyncMock) -> None:
        await enqueue_cook_nudge()

        assert mock_pool.enqueue_job.call_args.kwargs["_job_id"] == "cook_nudge"
