"""Background job workers using ARQ."""

from app.workers.arq import WorkerSettings, get_redis_settings
from app.workers.jobs import (
    close_arq_pool,
    enqueue_cook_nudge,
    enqueue_job,
    enqueue_push_notification,
    get_arq_pool,
)


__all__ = [
    "WorkerSettings",
    "close_arq_pool",
    "enqueue_cook_nudge",
    "enqueue_job",
    "enqueue_push_notification",
    "get_arq_pool",
    "get_redis_settings",
]
