"""Cron trigger schemas."""

from __future__ import annotations

from app.schemas.base import APIResponse


class CookNudgeResponse(APIResponse):
    ok: bool = True
    candidates: int
    notifications_sent: int
