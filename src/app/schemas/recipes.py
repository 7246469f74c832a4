"""Recipe request and response schemas."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import Field

from app.schemas.base import APIRequest, APIResponse
from app.schemas.types import HttpUrlStr


class RecipeIngredientInput(APIRequest):
    name: str = Field(..., min_length=1, max_length=255)
    quantity: str | None = Field(default=None, max_length=100)
    unit: str | None = Field(default=None, max_length=50)
    category: str | None = Field(default=None, max_length=100)


class RecipeCreateRequest(APIRequest):
    """Body for creating a recipe; also the shape of each zip archive member."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    instructions: str | None = Field(default=None, max_length=10000)
    image_url: HttpUrlStr | None = None
    cuisine: str | None = Field(default=None, max_length=100)
    category: str | None = Field(default=None, max_length=100)
    cooking_time: int | None = Field(default=None, ge=1, le=1440)
    servings: int | None = Field(default=None, ge=1, le=100)
    calories_per_serving: int | None = Field(default=None, ge=1, le=5000)
    source_url: HttpUrlStr | None = None
    source: str = Field(default="user_import", max_length=100)
    ingredients: list[RecipeIngredientInput] = Field(default_factory=list, max_length=100)


class RecipeResponse(APIResponse):
    id: int
    user_id: int
    external_id: str | None = None
    name: str
    description: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    cuisine: str | None = None
    category: str | None = None
    cooking_time: int | None = None
    servings: int | None = None
    calories_per_serving: int | None = None
    source_url: str | None = None
    source: str
    is_favorite: bool
    is_shared: bool
    cooked_at: datetime | None = None
    cooked_count: int
    created_at: datetime
    updated_at: datetime


class RecipeIngredientResponse(APIResponse):
    id: int
    recipe_id: int
    ingredient_id: int
    name: str
    category: str | None = None
    image_url: str | None = None
    quantity: str | None = None
    unit: str | None = None


class ParseUrlRequest(APIRequest):
    url: HttpUrlStr
    auto_save: bool = False


class ParsedIngredientResponse(APIResponse):
    name: str
    quantity: str | None = None
    unit: str | None = None


class ParsedRecipeResponse(APIResponse):
    name: str
    description: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    cuisine: str | None = None
    category: str | None = None
    cooking_time: int | None = None
    servings: int | None = None
    calories_per_serving: int | None = None
    source_url: str | None = None
    source: str
    ingredients: list[ParsedIngredientResponse] = Field(default_factory=list)


class ParseUrlResponse(APIResponse):
    """Either the parsed recipe or, with ``autoSave``, the new recipe id."""

    parsed: ParsedRecipeResponse | None = None
    id: int | None = None


class ImportZipResponse(APIResponse):
    success: bool = True
    imported: int


class FavoriteRequest(APIRequest):
    is_favorite: bool


class MealSummaryResponse(APIResponse):
    """A TheMealDB search hit."""

    id_meal: str
    str_meal: str
    str_meal_thumb: str | None = None
    source: str = "TheMealDB"


class MealImportRequest(APIRequest):
    meal_id: str = Field(..., min_length=1, max_length=20)


class IngredientSearchRequest(APIRequest):
    ingredients: list[Annotated[str, Field(min_length=1, max_length=100)]] = Field(
        ..., min_length=1, max_length=5
    )
