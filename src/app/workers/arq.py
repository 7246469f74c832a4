"""ARQ worker configuration.

Run with: ``arq app.workers.arq.WorkerSettings``
"""

from __future__ import annotations

from collections.abc import Callable, Coroutine
from typing import TYPE_CHECKING, Any, ClassVar

from arq import cron
from arq.connections import RedisSettings

from app.core.config import get_settings
from app.database.connection import close_database_pool, init_database_pool
from app.observability.logging import get_logger, setup_logging
from app.services.notifications.push import PushClient
from app.workers.tasks.cook_nudge import cook_nudge, send_push_notification


if TYPE_CHECKING:
    from arq.cron import CronJob


logger = get_logger(__name__)

WorkerFunction = Callable[..., Coroutine[Any, Any, Any]]


async def startup(ctx: dict[str, Any]) -> None:
    """Open the database pool and the push client for tasks."""
    settings = get_settings()
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )
    logger.info("ARQ worker starting", environment=settings.APP_ENV)

    await init_database_pool()
    push_client = PushClient()
    await push_client.initialize()
    ctx["push_client"] = push_client


async def shutdown(ctx: dict[str, Any]) -> None:
    logger.info("ARQ worker shutting down")
    if ctx.get("push_client"):
        await ctx["push_client"].shutdown()
    await close_database_pool()


def get_redis_settings() -> RedisSettings:
    """Redis settings for the job queue database."""
    settings = get_settings()
    return RedisSettings(
        host=settings.redis.host,
        port=settings.redis.port,
        username=settings.redis.user,
        password=settings.REDIS_PASSWORD or None,
        database=settings.redis.queue_db,
    )


def _cook_nudge_cron() -> CronJob:
    settings = get_settings()
    schedule = settings.cron.cook_nudge
    return cron(
        cook_nudge,  # type: ignore[arg-type]
        hour=schedule.hour,
        minute=schedule.minute,
        job_id=settings.arq.job_ids.cook_nudge,
        unique=True,
    )


class WorkerSettings:
    """ARQ worker settings read by the arq CLI."""

    redis_settings = get_redis_settings()
    queue_name = get_settings().arq.queue_name
    health_check_key = get_settings().arq.health_check_key

    on_startup = startup
    on_shutdown = shutdown

    job_timeout = 300
    max_jobs = 10
    keep_result = 3600
    max_tries = 3

    functions: ClassVar[list[WorkerFunction]] = [cook_nudge, send_push_notification]

    cron_jobs: ClassVar[list[CronJob]] = [_cook_nudge_cron()]
