"""Direct messaging."""

from app.services.messaging.service import MessagingService


__all__ = ["MessagingService"]
