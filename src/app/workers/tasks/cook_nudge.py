"""Cook-nudge background tasks.

``cook_nudge`` runs daily as an ARQ cron job; ``send_push_notification``
lets the API hand a single push off to the worker.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.observability.logging import get_logger
from app.services.nudges import CookNudgeService


if TYPE_CHECKING:
    from app.services.notifications.push import PushClient


logger = get_logger(__name__)


async def cook_nudge(ctx: dict[str, Any]) -> dict[str, Any]:
    """Push a reminder for each recipe saved days ago and never cooked.

    Args:
        ctx: ARQ worker context holding ``push_client``.

    Returns:
        ``{"ok": True, "candidates": n, "notifications_sent": m}``.
    """
    push_client: PushClient = ctx["push_client"]
    result = await CookNudgeService(push_client).run()
    return {
        "ok": True,
        "candidates": result.candidates,
        "notifications_sent": result.notifications_sent,
    }


async def send_push_notification(
    ctx: dict[str, Any],
    token: str,
    title: str,
    body: str,
    data: dict[str, Any] | None = None,
) -> bool:
    """Deliver one push; returns whether Expo accepted it."""
    push_client: PushClient = ctx["push_client"]
    accepted = await push_client.send(token, title, body, data)
    logger.debug("Push task finished", accepted=accepted)
    return accepted
