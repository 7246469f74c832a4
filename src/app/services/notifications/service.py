"""In-app notifications and push token registration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from app.database.repositories.notifications import (
    Notification,
    NotificationRepository,
    PushPlatform,
    PushTokenRepository,
)
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from app.services.notifications.push import PushClient


logger = get_logger(__name__)

MAX_LIST_LIMIT = 100


class NotificationService:
    """Notification inbox plus push delivery to the user's devices."""

    def __init__(
        self,
        notifications: NotificationRepository | None = None,
        push_tokens: PushTokenRepository | None = None,
        push_client: PushClient | None = None,
    ) -> None:
        self._notifications = notifications or NotificationRepository()
        self._push_tokens = push_tokens or PushTokenRepository()
        self._push_client = push_client

    async def list_notifications(self, user_id: int, limit: int = 50) -> list[Notification]:
        return await self._notifications.list_for_user(
            user_id, min(limit, MAX_LIST_LIMIT)
        )

    async def unread_count(self, user_id: int) -> int:
        return await self._notifications.count_unread(user_id)

    async def mark_read(self, user_id: int, notification_id: int) -> None:
        await self._notifications.mark_read(notification_id, user_id)

    async def mark_all_read(self, user_id: int) -> None:
        await self._notifications.mark_all_read(user_id)

    async def delete(self, user_id: int, notification_id: int) -> None:
        await self._notifications.delete(notification_id, user_id)

    async def register_push_token(
        self, user_id: int, token: str, platform: PushPlatform
    ) -> None:
        await self._push_tokens.upsert(user_id, token, platform)
        logger.info("Push token registered", platform=platform)

    async def unregister_push_token(self, user_id: int, token: str) -> None:
        await self._push_tokens.delete(user_id, token)

    async def push_to_user(
        self,
        user_id: int,
        title: str,
        body: str,
        data: dict[str, Any] | None = None,
    ) -> int:
        """Push to every registered device; returns how many Expo accepted."""
        if self._push_client is None:
            return 0
        sent = 0
        for token in await self._push_tokens.list_tokens(user_id):
            if await self._push_client.send(token, title, body, data):
                sent += 1
        return sent
