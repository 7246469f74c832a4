"""Notifications and push delivery."""

from app.services.notifications.push import PushClient
from app.services.notifications.service import NotificationService


__all__ = ["NotificationService", "PushClient"]
