"""User preference schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse


class PreferencesResponse(APIResponse):
    dietary_preferences: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    goals: dict[str, Any] | None = None
    calorie_budget: int | None = None


class PreferencesUpdateRequest(APIRequest):
    """Partial update; an explicit ``calorieBudget: null`` clears it."""

    dietary_preferences: list[str] | None = Field(default=None, max_length=50)
    allergies: list[str] | None = Field(default=None, max_length=50)
    goals: dict[str, Any] | None = None
    calorie_budget: int | None = Field(default=None, ge=1, le=10000)
