"""Parsed recipe models produced by URL scraping and LLM extraction."""

from __future__ import annotations

from pydantic import BaseModel, Field


class ParsedIngredient(BaseModel):
    """An ingredient line split into name, quantity and unit."""

    name: str
    quantity: str | None = None
    unit: str | None = None


class ParsedRecipe(BaseModel):
    """A recipe extracted from a web page, ready to be saved.

    ``instructions`` holds one step per line.
    """

    name: str = Field(..., min_length=1)
    description: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    cuisine: str | None = None
    category: str | None = None
    cooking_time: int | None = Field(None, description="Total time in minutes")
    servings: int | None = None
    calories_per_serving: int | None = None
    source_url: str | None = None
    source: str = "url_import"
    ingredients: list[ParsedIngredient] = Field(default_factory=list)
