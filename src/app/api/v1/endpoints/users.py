"""User preference endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends

from app.api.dependencies import get_user_repository
from app.auth.dependencies import UserOrAnonymous
from app.core.exceptions import NotFoundException
from app.database.repositories.users import UserPreferencesUpdate, UserRepository
from app.schemas.users import PreferencesResponse, PreferencesUpdateRequest


router = APIRouter(prefix="/user", tags=["Users"])

Users = Annotated[UserRepository, Depends(get_user_repository)]


@router.get("/preferences", response_model=PreferencesResponse, summary="Get preferences")
async def get_preferences(user: UserOrAnonymous) -> PreferencesResponse:
    return PreferencesResponse.model_validate(user)


@router.patch(
    "/preferences", response_model=PreferencesResponse, summary="Update preferences"
)
async def update_preferences(
    body: PreferencesUpdateRequest, user: UserOrAnonymous, users: Users
) -> PreferencesResponse:
    """Partial update. Omitted fields keep their value; a null budget clears it."""
    update = UserPreferencesUpdate(
        dietary_preferences=body.dietary_preferences,
        allergies=body.allergies,
        goals=body.goals,
        calorie_budget=body.calorie_budget,
        clear_calorie_budget=(
            "calorie_budget" in body.model_fields_set and body.calorie_budget is None
        ),
    )
    updated = await users.update_preferences(user.id, update)
    if updated is None:
        raise NotFoundException("User")
    return PreferencesResponse.model_validate(updated)
