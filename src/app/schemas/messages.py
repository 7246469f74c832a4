"""Direct messaging schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse


class MessageResponse(APIResponse):
    id: int
    conversation_id: int
    sender_id: int
    content: str
    is_read: bool
    created_at: datetime


class ConversationResponse(APIResponse):
    id: int
    user1_id: int
    user2_id: int
    last_message_at: datetime
    created_at: datetime


class OtherUserResponse(APIResponse):
    id: int
    name: str | None = None
    email: str | None = None


class ConversationSummaryResponse(ConversationResponse):
    other_user: OtherUserResponse
    last_message: MessageResponse | None = None


class SendMessageRequest(APIRequest):
    """Target either an existing conversation or a recipient."""

    conversation_id: int | None = Field(default=None, ge=1)
    recipient_id: int | None = Field(default=None, ge=1)
    content: str = Field(..., min_length=1, max_length=5000)
