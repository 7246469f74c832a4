"""Authentication schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import Field

from app.schemas.base import APIResponse


class UserResponse(APIResponse):
    """The signed-in user."""

    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    login_method: str | None = None
    role: str
    dietary_preferences: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    goals: dict[str, Any] | None = None
    calorie_budget: int | None = None
    created_at: datetime
    last_signed_in: datetime
