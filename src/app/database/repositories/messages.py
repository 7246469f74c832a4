"""Direct message repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from app.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Record


class Conversation(BaseModel):
    """A two-party conversation."""

    id: int
    user1_id: int
    user2_id: int
    last_message_at: datetime
    created_at: datetime

    def includes(self, user_id: int) -> bool:
        return user_id in (self.user1_id, self.user2_id)

    def other_user_id(self, user_id: int) -> int:
        return self.user2_id if self.user1_id == user_id else self.user1_id


class Message(BaseModel):
    """A message within a conversation."""

    id: int
    conversation_id: int
    sender_id: int
    content: str
    is_read: bool = False
    created_at: datetime


class ConversationSummary(BaseModel):
    """A conversation enriched with the other participant and last message."""

    conversation: Conversation
    other_user_id: int
    other_user_name: str | None = None
    other_user_email: str | None = None
    last_message: Message | None = None


class MessageRepository(BaseRepository):
    """Data access for ``conversations`` and ``messages``."""

    async def list_conversations(self, user_id: int) -> list[ConversationSummary]:
        """The user's conversations, most recently active first."""
        query = """
            SELECT c.id, c.user1_id, c.user2_id, c.last_message_at, c.created_at,
                   u.id AS other_user_id, u.name AS other_user_name,
                   u.email AS other_user_email,
                   m.id AS message_id, m.sender_id, m.content, m.is_read,
                   m.created_at AS message_created_at
            FROM conversations c
            JOIN users u
              ON u.id = CASE WHEN c.user1_id = $1 THEN c.user2_id ELSE c.user1_id END
            LEFT JOIN LATERAL (
                SELECT * FROM messages
                WHERE conversation_id = c.id
                ORDER BY created_at DESC, id DESC
                LIMIT 1
            ) m ON true
            WHERE c.user1_id = $1 OR c.user2_id = $1
            ORDER BY c.last_message_at DESC
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, user_id)
        return [self._row_to_summary(row) for row in rows]

    async def get_conversation(self, conversation_id: int) -> Conversation | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM conversations WHERE id = $1", conversation_id
            )
        return Conversation.model_validate(dict(row)) if row else None

    async def get_or_create_conversation(self, user_a: int, user_b: int) -> Conversation:
        """Return the conversation between two users in either order, creating it."""
        async with self.pool.acquire() as conn, conn.transaction():
            row = await conn.fetchrow(
                """
                SELECT * FROM conversations
                WHERE (user1_id = $1 AND user2_id = $2)
                   OR (user1_id = $2 AND user2_id = $1)
                ORDER BY id
                LIMIT 1
                """,
                user_a,
                user_b,
            )
            if row is None:
                row = await conn.fetchrow(
                    """
                    INSERT INTO conversations (user1_id, user2_id)
                    VALUES ($1, $2)
                    RETURNING *
                    """,
                    user_a,
                    user_b,
                )
        return Conversation.model_validate(dict(row))

    async def create_message(
        self, conversation_id: int, sender_id: int, content: str
    ) -> Message:
        """Insert a message and bump the conversation's ``last_message_at``."""
        async with self.pool.acquire() as conn, conn.transaction():
            row = await conn.fetchrow(
                """
                INSERT INTO messages (conversation_id, sender_id, content)
                VALUES ($1, $2, $3)
                RETURNING *
                """,
                conversation_id,
                sender_id,
                content,
            )
            await conn.execute(
                "UPDATE conversations SET last_message_at = now() WHERE id = $1",
                conversation_id,
            )
        return Message.model_validate(dict(row))

    async def list_messages(self, conversation_id: int, limit: int = 100) -> list[Message]:
        """The latest ``limit`` messages, oldest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                """
                SELECT * FROM messages
                WHERE conversation_id = $1
                ORDER BY created_at DESC, id DESC
                LIMIT $2
                """,
                conversation_id,
                limit,
            )
        return [Message.model_validate(dict(row)) for row in reversed(rows)]

    async def mark_read(self, conversation_id: int, reader_id: int) -> None:
        """Mark messages sent to ``reader_id`` in a conversation as read."""
        async with self.pool.acquire() as conn:
            await conn.execute(
                """
                UPDATE messages SET is_read = true
                WHERE conversation_id = $1 AND sender_id <> $2 AND NOT is_read
                """,
                conversation_id,
                reader_id,
            )

    async def count_unread(self, user_id: int) -> int:
        query = """
            SELECT count(*)
            FROM messages m
            JOIN conversations c ON c.id = m.conversation_id
            WHERE (c.user1_id = $1 OR c.user2_id = $1)
              AND m.sender_id <> $1
              AND NOT m.is_read
        """
        async with self.pool.acquire() as conn:
            count = await conn.fetchval(query, user_id)
        return int(count or 0)

    @staticmethod
    def _row_to_summary(row: Record) -> ConversationSummary:
        conversation = Conversation(
            id=row["id"],
            user1_id=row["user1_id"],
            user2_id=row["user2_id"],
            last_message_at=row["last_message_at"],
            created_at=row["created_at"],
        )
        last_message = None
        if row["message_id"] is not None:
            last_message = Message(
                id=row["message_id"],
                conversation_id=row["id"],
                sender_id=row["sender_id"],
                content=row["content"],
                is_read=row["is_read"],
                created_at=row["message_created_at"],
            )
        return ConversationSummary(
            conversation=conversation,
            other_user_id=row["other_user_id"],
            other_user_name=row["other_user_name"],
            other_user_email=row["other_user_email"],
            last_message=last_message,
        )
