"""Direct messaging endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, status

from app.api.dependencies import get_messaging_service
from app.auth.dependencies import CurrentUser
from app.core.exceptions import NotFoundException, ValidationException
from app.database.repositories.messages import ConversationSummary
from app.schemas.messages import (
    ConversationResponse,
    ConversationSummaryResponse,
    MessageResponse,
    OtherUserResponse,
    SendMessageRequest,
)
from app.schemas.notifications import UnreadCountResponse
from app.services.messaging import MessagingService
from app.services.messaging.exceptions import (
    ConversationNotFoundError,
    InvalidRecipientError,
)


router = APIRouter(prefix="/messages", tags=["Messages"])

Messaging = Annotated[MessagingService, Depends(get_messaging_service)]


def summary_response(summary: ConversationSummary) -> ConversationSummaryResponse:
    conversation = summary.conversation
    return ConversationSummaryResponse(
        id=conversation.id,
        user1_id=conversation.user1_id,
        user2_id=conversation.user2_id,
        last_message_at=conversation.last_message_at,
        created_at=conversation.created_at,
        other_user=OtherUserResponse(
            id=summary.other_user_id,
            name=summary.other_user_name,
            email=summary.other_user_email,
        ),
        last_message=(
            MessageResponse.model_validate(summary.last_message)
            if summary.last_message
            else None
        ),
    )


@router.get(
    "/conversations",
    response_model=list[ConversationSummaryResponse],
    summary="List conversations",
)
async def list_conversations(
    user: CurrentUser, messaging: Messaging
) -> list[ConversationSummaryResponse]:
    """Newest activity first, with the other participant and the last message."""
    return [summary_response(s) for s in await messaging.list_conversations(user.id)]


@router.get(
    "/unread-count", response_model=UnreadCountResponse, summary="Unread messages"
)
async def unread_count(user: CurrentUser, messaging: Messaging) -> UnreadCountResponse:
    return UnreadCountResponse(count=await messaging.unread_count(user.id))


@router.get(
    "/conversations/{conversation_id}",
    response_model=ConversationResponse,
    summary="Get a conversation",
)
async def get_conversation(
    conversation_id: int, user: CurrentUser, messaging: Messaging
) -> ConversationResponse:
    try:
        conversation = await messaging.get_conversation(user.id, conversation_id)
    except ConversationNotFoundError:
        raise NotFoundException("Conversation") from None
    return ConversationResponse.model_validate(conversation)


@router.get(
    "/conversations/{conversation_id}/messages",
    response_model=list[MessageResponse],
    summary="Messages in a conversation",
)
async def list_messages(
    conversation_id: int,
    user: CurrentUser,
    messaging: Messaging,
    limit: Annotated[int, Query(ge=1, le=100)] = 100,
) -> list[MessageResponse]:
    """Oldest first; the other party's messages are marked read."""
    try:
        messages = await messaging.list_messages(user.id, conversation_id, limit)
    except ConversationNotFoundError:
        raise NotFoundException("Conversation") from None
    return [MessageResponse.model_validate(m) for m in messages]


@router.post(
    "",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Send a message",
)
async def send_message(
    body: SendMessageRequest, user: CurrentUser, messaging: Messaging
) -> MessageResponse:
    try:
        message = await messaging.send_message(
            user.id,
            body.content,
            conversation_id=body.conversation_id,
            recipient_id=body.recipient_id,
        )
    except InvalidRecipientError as e:
        raise ValidationException(str(e)) from None
    except ConversationNotFoundError:
        raise NotFoundException("Conversation") from None
    return MessageResponse.model_validate(message)
