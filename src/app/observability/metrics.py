"""Prometheus metrics.

HTTP request metrics come from ``prometheus-fastapi-instrumentator``; the
domain counters below are incremented by the services that own them.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from prometheus_client import Counter
from prometheus_fastapi_instrumentator import Instrumentator, metrics

from app.core.config import get_settings
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from fastapi import FastAPI


logger = get_logger(__name__)

METRIC_NAMESPACE = "kitchen"

RECIPE_IMPORTS = Counter(
    "recipe_imports_total",
    "Recipes created, by import source",
    ["source"],
    namespace=METRIC_NAMESPACE,
)

PUSH_NOTIFICATIONS = Counter(
    "push_notifications_total",
    "Expo push notifications attempted, by outcome",
    ["outcome"],
    namespace=METRIC_NAMESPACE,
)


def record_recipe_import(source: str) -> None:
    RECIPE_IMPORTS.labels(source=source).inc()


def record_push_notification(*, success: bool) -> None:
    PUSH_NOTIFICATIONS.labels(outcome="accepted" if success else "failed").inc()


def setup_metrics(app: FastAPI) -> Instrumentator:
    """Instrument ``app`` and expose ``{prefix}/metrics``."""
    settings = get_settings()

    if not settings.observability.metrics.enabled:
        logger.info("Metrics collection disabled")
        return Instrumentator()

    prefix = settings.api.v1_prefix
    instrumentator = Instrumentator(
        should_group_status_codes=True,
        should_ignore_untemplated=True,
        should_instrument_requests_inprogress=True,
        excluded_handlers=[
            f"{prefix}/health",
            f"{prefix}/ready",
            f"{prefix}/metrics",
        ],
        inprogress_name="http_requests_inprogress",
        inprogress_labels=True,
    )
    instrumentator.add(
        metrics.default(
            metric_namespace=METRIC_NAMESPACE,
            metric_subsystem="http",
        )
    )
    instrumentator.instrument(app)

    metrics_endpoint = f"{prefix}/metrics"
    instrumentator.expose(
        app,
        endpoint=metrics_endpoint,
        include_in_schema=True,
        tags=["System"],
    )
    logger.info("Prometheus metrics configured", endpoint=metrics_endpoint)
    return instrumentator


__all__ = ["record_push_notification", "record_recipe_import", "setup_metrics"]
