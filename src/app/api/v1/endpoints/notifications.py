"""In-app notification and push token endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_notification_service
from app.auth.dependencies import CurrentUser
from app.schemas.base import SuccessResponse
from app.schemas.notifications import (
    NotificationResponse,
    PushTokenDeleteRequest,
    PushTokenRequest,
    UnreadCountResponse,
)
from app.services.notifications import NotificationService


router = APIRouter(tags=["Notifications"])

Notifications = Annotated[NotificationService, Depends(get_notification_service)]


@router.get(
    "/notifications",
    response_model=list[NotificationResponse],
    summary="List notifications",
)
async def list_notifications(
    user: CurrentUser,
    notifications: Notifications,
    limit: Annotated[int, Query(ge=1, le=100)] = 50,
) -> list[NotificationResponse]:
    """Newest first."""
    rows = await notifications.list_notifications(user.id, limit)
    return [NotificationResponse.model_validate(n) for n in rows]


@router.get(
    "/notifications/unread-count",
    response_model=UnreadCountResponse,
    summary="Unread notification count",
)
async def unread_count(
    user: CurrentUser, notifications: Notifications
) -> UnreadCountResponse:
    return UnreadCountResponse(count=await notifications.unread_count(user.id))


@router.post(
    "/notifications/read-all", response_model=SuccessResponse, summary="Mark all read"
)
async def mark_all_read(user: CurrentUser, notifications: Notifications) -> SuccessResponse:
    await notifications.mark_all_read(user.id)
    return SuccessResponse()


@router.post(
    "/notifications/{notification_id}/read",
    response_model=SuccessResponse,
    summary="Mark one read",
)
async def mark_read(
    notification_id: int, user: CurrentUser, notifications: Notifications
) -> SuccessResponse:
    await notifications.mark_read(user.id, notification_id)
    return SuccessResponse()


@router.delete(
    "/notifications/{notification_id}",
    response_model=SuccessResponse,
    summary="Delete a notification",
)
async def delete_notification(
    notification_id: int, user: CurrentUser, notifications: Notifications
) -> SuccessResponse:
    await notifications.delete(user.id, notification_id)
    return SuccessResponse()


@router.post("/push-tokens", response_model=SuccessResponse, summary="Register a device")
async def register_push_token(
    body: PushTokenRequest, user: CurrentUser, notifications: Notifications
) -> SuccessResponse:
    await notifications.register_push_token(user.id, body.token, body.platform)
    return SuccessResponse()


@router.delete(
    "/push-tokens", response_model=SuccessResponse, summary="Unregister a device"
)
async def unregister_push_token(
    body: PushTokenDeleteRequest, user: CurrentUser, notifications: Notifications
) -> SuccessResponse:
    await notifications.unregister_push_token(user.id, body.token)
    return SuccessResponse()
