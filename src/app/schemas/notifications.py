"""Notification and push token schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from app.database.repositories.notifications import PushPlatform
from app.schemas.base import APIRequest, APIResponse


class NotificationResponse(APIResponse):
    id: int
    type: str
    title: str
    content: str | None = None
    is_read: bool
    action_url: str | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime


class UnreadCountResponse(APIResponse):
    count: int


class PushTokenRequest(APIRequest):
    token: str = Field(..., min_length=1, max_length=500)
    platform: PushPlatform


class PushTokenDeleteRequest(APIRequest):
    token: str = Field(..., min_length=1, max_length=500)
