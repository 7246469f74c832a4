"""Direct messages between two users."""

from __future__ import annotations

from app.database.repositories.messages import (
    Conversation,
    ConversationSummary,
    Message,
    MessageRepository,
)
from app.observability.logging import get_logger
from app.services.messaging.exceptions import (
    ConversationNotFoundError,
    InvalidRecipientError,
)


logger = get_logger(__name__)

MAX_MESSAGES = 100


class MessagingService:
    def __init__(self, messages: MessageRepository | None = None) -> None:
        self._messages = messages or MessageRepository()

    async def list_conversations(self, user_id: int) -> list[ConversationSummary]:
        return await self._messages.list_conversations(user_id)

    async def get_conversation(self, user_id: int, conversation_id: int) -> Conversation:
        """Load a conversation the caller takes part in.

        Non-participants get the same error as a missing conversation.
        """
        conversation = await self._messages.get_conversation(conversation_id)
        if conversation is None or not conversation.includes(user_id):
            raise ConversationNotFoundError("Conversation not found")
        return conversation

    async def list_messages(
        self, user_id: int, conversation_id: int, limit: int = MAX_MESSAGES
    ) -> list[Message]:
        """Messages oldest first; marks the other party's messages read."""
        await self.get_conversation(user_id, conversation_id)
        messages = await self._messages.list_messages(
            conversation_id, min(limit, MAX_MESSAGES)
        )
        await self._messages.mark_read(conversation_id, user_id)
        return messages

    async def send_message(
        self,
        user_id: int,
        content: str,
        *,
        conversation_id: int | None = None,
        recipient_id: int | None = None,
    ) -> Message:
        if recipient_id is not None:
            if recipient_id == user_id:
                raise InvalidRecipientError("Cannot send message to yourself")
            conversation = await self._messages.get_or_create_conversation(
                user_id, recipient_id
            )
        elif conversation_id is not None:
            conversation = await self.get_conversation(user_id, conversation_id)
        else:
            raise InvalidRecipientError(
                "Either conversationId or recipientId is required"
            )

        message = await self._messages.create_message(conversation.id, user_id, content)
        logger.info("Message sent", conversation_id=conversation.id)
        return message

    async def unread_count(self, user_id: int) -> int:
        return await self._messages.count_unread(user_id)
