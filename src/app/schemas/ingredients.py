"""Ingredient, pantry and image upload schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse
from app.schemas.types import HttpUrlStr, LongHttpUrlStr


class IngredientResponse(APIResponse):
    id: int
    name: str
    category: str | None = None
    image_url: str | None = None
    created_at: datetime


class IngredientCreateRequest(APIRequest):
    """Get-or-create body; ``imageUrl`` only fills a missing image."""

    name: str = Field(..., min_length=1, max_length=255)
    category: str | None = Field(default=None, max_length=100)
    image_url: HttpUrlStr | None = None


class IngredientImageRequest(APIRequest):
    image_url: HttpUrlStr


class RecognizeIngredientsRequest(APIRequest):
    image_url: LongHttpUrlStr


class RecognizeIngredientsResponse(APIResponse):
    ingredients: list[str]


class UploadUrlRequest(APIRequest):
    file_name: str = Field(..., min_length=1, max_length=255)
    content_type: str = Field(default="image/jpeg", max_length=100)


class UploadUrlResponse(APIResponse):
    upload_url: str
    file_url: str


class UploadImageRequest(APIRequest):
    """Base64 image data, optionally with a ``data:`` URL prefix."""

    data: str = Field(..., min_length=1)
    file_name: str = Field(default="image.jpg", min_length=1, max_length=255)
    content_type: str = Field(default="image/jpeg", max_length=100)


class UploadImageResponse(APIResponse):
    url: str


class PantryAddRequest(APIRequest):
    ingredient_id: int = Field(..., ge=1)
    quantity: str | None = Field(default=None, max_length=100)
    unit: str | None = Field(default=None, max_length=50)


class PantryItemResponse(APIResponse):
    id: int
    ingredient_id: int
    name: str
    category: str | None = None
    image_url: str | None = None
    quantity: str | None = None
    unit: str | None = None
    created_at: datetime
