"""Background task definitions."""

from app.workers.tasks.cook_nudge import cook_nudge, send_push_notification


__all__ = ["cook_nudge", "send_push_notification"]
