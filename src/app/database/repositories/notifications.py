"""In-app notification and push token repositories."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel

from app.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Record


class PushPlatform(StrEnum):
    """Device platform of an Expo push token."""

    IOS = "ios"
    ANDROID = "android"
    WEB = "web"


class Notification(BaseModel):
    """An in-app notification row."""

    id: int
    user_id: int
    type: str
    title: str
    content: str | None = None
    is_read: bool = False
    action_url: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime


class PushToken(BaseModel):
    """A registered Expo push token."""

    id: int
    user_id: int
    token: str
    platform: PushPlatform
    created_at: datetime


class NotificationRepository(BaseRepository):
    """Data access for ``notifications``. Every query is scoped to a user."""

    async def create(
        self,
        user_id: int,
        title: str,
        *,
        type_: str = "system",
        content: str | None = None,
        action_url: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> int:
        query = """
            INSERT INTO notifications (user_id, type, title, content, action_url, metadata)
            VALUES ($1, $2, $3, $4, $5, $6)
            RETURNING id
        """
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                query,
                user_id,
                type_,
                title,
                content,
                action_url,
                orjson.dumps(metadata).decode() if metadata is not None else None,
            )

    async def list_for_user(self, user_id: int, limit: int = 50) -> list[Notification]:
        """Newest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT * FROM notifications
                WHERE user_id = $1
                ORDER BY created_at DESC, id DESC
                LIMIT $2
                """,
                user_id,
                limit,
            )
        return [self._row_to_notification(row) for row in rows]

    async def count_unread(self, user_id: int) -> int:
        async with self.pool.acquire() as conn:
            count = await conn.fetchval(
                "SELECT count(*) FROM notifications WHERE user_id = $1 AND NOT is_read",
                user_id,
            )
        return int(count or 0)

    async def mark_read(self, notification_id: int, user_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE notifications SET is_read = true WHERE id = $1 AND user_id = $2",
                notification_id,
                user_id,
            )

    async def mark_all_read(self, user_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE notifications SET is_read = true WHERE user_id = $1 AND NOT is_read",
                user_id,
            )

    async def delete(self, notification_id: int, user_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "DELETE FROM notifications WHERE id = $1 AND user_id = $2",
                notification_id,
                user_id,
            )

    @staticmethod
    def _row_to_notification(row: Record) -> Notification:
        data = dict(row)
        raw = data.get("metadata")
        data["metadata"] = orjson.loads(raw) if raw else None
        return Notification.model_validate(data)


class PushTokenRepository(BaseRepository):
    """Data access for ``push_tokens``."""

    async def upsert(self, user_id: int, token: str, platform: PushPlatform) -> None:
        query = """
            INSERT INTO push_tokens (user_id, token, platform)
            VALUES ($1, $2, $3)
            ON CONFLICT (user_id, token) DO UPDATE SET
                platform = EXCLUDED.platform,
                updated_at = now()
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, user_id, token, platform.value)

    async def delete(self, user_id: int, token: str) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "DELETE FROM push_tokens WHERE user_id = $1 AND token = $2",
                user_id,
                token,
            )

    async def list_tokens(self, user_id: int) -> list[str]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT token FROM push_tokens WHERE user_id = $1 ORDER BY id", user_id
            )
        return [row["token"] for row in rows]
