"""Job enqueue helpers used by the API process."""

from __future__ import annotations

from typing import Any

from arq.connections import ArqRedis, create_pool
from arq.jobs import Job

from app.core.config import get_settings
from app.observability.logging import get_logger
from app.workers.arq import get_redis_settings


logger = get_logger(__name__)

_arq_pool: ArqRedis | None = None


async def get_arq_pool() -> ArqRedis:
    """Get or create the ARQ connection pool."""
    global _arq_pool  # noqa: PLW0603

    if _arq_pool is None:
        _arq_pool = await create_pool(
            get_redis_settings(), default_queue_name=get_settings().arq.queue_name
        )
        logger.debug("Created ARQ connection pool")
    return _arq_pool


async def close_arq_pool() -> None:
    global _arq_pool  # noqa: PLW0603

    if _arq_pool is not None:
        await _arq_pool.close()
        _arq_pool = None
        logger.debug("Closed ARQ connection pool")


async def enqueue_job(
    function_name: str,
    *args: Any,
    _job_id: str | None = None,
    **kwargs: Any,
) -> Job | None:
    """Enqueue a task; returns ``None`` if Redis is unavailable."""
    try:
        pool = await get_arq_pool()
        job = await pool.enqueue_job(
            function_name,
            *args,
            _job_id=_job_id,
            _queue_name=get_settings().arq.queue_name,
            **kwargs,
        )
    except Exception:
        logger.exception("Failed to enqueue job", function=function_name)
        return None
    logger.info("Enqueued job", function=function_name, job_id=job.job_id if job else None)
    return job


async def enqueue_push_notification(
    token: str,
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
) -> Job | None:
    return await enqueue_job("send_push_notification", token, title, body, data)


async def enqueue_cook_nudge() -> Job | None:
    """Run the cook nudge now; the fixed job id prevents overlapping runs."""
    return await enqueue_job("cook_nudge", _job_id=get_settings().arq.job_ids.cook_nudge)
