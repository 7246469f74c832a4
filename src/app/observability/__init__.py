"""Observability components: logging, metrics, and tracing."""

from app.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    setup_logging,
    unbind_context,
)
from app.observability.metrics import (
    record_push_notification,
    record_recipe_import,
    setup_metrics,
)
from app.observability.tracing import setup_tracing, shutdown_tracing


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "record_push_notification",
    "record_recipe_import",
    "setup_logging",
    "setup_metrics",
    "setup_tracing",
    "shutdown_tracing",
    "unbind_context",
]
