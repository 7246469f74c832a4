"""Shopping list schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse
from app.services.shopping.export import ExportFormat


class ShoppingListCreateRequest(APIRequest):
    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)


class ShoppingListUpdateRequest(APIRequest):
    name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)


class ShoppingListResponse(APIResponse):
    id: int
    user_id: int
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class ShoppingListItemRequest(APIRequest):
    ingredient_id: int = Field(..., ge=1)
    quantity: str | None = Field(default=None, max_length=100)
    unit: str | None = Field(default=None, max_length=50)


class ShoppingListItemResponse(APIResponse):
    id: int
    shopping_list_id: int
    ingredient_id: int
    name: str
    category: str | None = None
    quantity: str | None = None
    unit: str | None = None
    is_checked: bool
    created_at: datetime


class ToggleItemRequest(APIRequest):
    is_checked: bool


class AddFromRecipeRequest(APIRequest):
    recipe_id: int = Field(..., ge=1)


class AddFromRecipeResponse(APIResponse):
    success: bool = True
    added: int


class ExportRequest(APIRequest):
    format: ExportFormat = ExportFormat.CSV


class ExportResponse(APIResponse):
    content: str
    mime_type: str
    filename: str
