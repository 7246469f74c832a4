"""Prompt for extracting a recipe from raw web page text."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from app.services.scraping.parsing import join_instructions

from .base import BasePrompt


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ExtractedIngredient(_CamelModel):
    name: str
    quantity: str | None = None
    unit: str | None = None

    @field_validator("quantity", "unit", mode="before")
    @classmethod
    def _stringify(cls, v: Any) -> Any:
        # Models often answer numeric quantities as numbers
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return v


class ExtractedRecipe(_CamelModel):
    """Recipe fields as returned by the LLM.

    ``name`` may be missing when the page holds no recipe.
    """

    name: str | None = None
    description: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    cuisine: str | None = None
    category: str | None = None
    cooking_time: int | None = Field(None, description="Total time in minutes")
    servings: int | None = None
    calories_per_serving: int | None = None
    ingredients: list[ExtractedIngredient] = Field(default_factory=list)

    @field_validator("instructions", mode="before")
    @classmethod
    def _join_steps(cls, v: Any) -> Any:
        return join_instructions(v) if isinstance(v, list) else v


class RecipeExtractionPrompt(BasePrompt[ExtractedRecipe]):
    """Extract a single recipe from the visible text of a web page."""

    output_schema: ClassVar[type[BaseModel]] = ExtractedRecipe

    system_prompt: ClassVar[str] = (
        "You extract recipes from web pages. Respond with one JSON object with "
        "the keys name, description, instructions, imageUrl, cuisine, category, "
        "cookingTime (minutes), servings, caloriesPerServing and ingredients "
        "(a list of {name, quantity, unit}). Write instructions as one step per "
        "line. Use null for anything the page does not state. If the page has "
        "no recipe, return an object without a name."
    )

    temperature: ClassVar[float] = 0.1

    max_tokens: ClassVar[int | None] = 2000

    def format(self, **kwargs: Any) -> str:
        """Render the extraction request.

        Args:
            url: Page URL, used to resolve relative image links.
            content: Page HTML or text, already truncated.
        """
        url = kwargs.get("url", "")
        content = kwargs.get("content")
        if not content:
            msg = "content is required"
            raise ValueError(msg)
        return f"Extract the recipe from this page.\n\nURL: {url}\n\n{content}"
