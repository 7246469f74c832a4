"""Vision prompt listing the ingredients visible in a photo."""

from __future__ import annotations

from typing import Any, ClassVar

from pydantic import BaseModel, Field

from .base import BasePrompt


class RecognizedIngredients(BaseModel):
    ingredients: list[str] = Field(default_factory=list)


class IngredientRecognitionPrompt(BasePrompt[RecognizedIngredients]):
    output_schema: ClassVar[type[BaseModel]] = RecognizedIngredients

    system_prompt: ClassVar[str] = (
        "You identify food ingredients in photos. Respond with JSON of the form "
        '{"ingredients": ["tomato", "onion"]} using short lowercase names.'
    )

    max_tokens: ClassVar[int | None] = 500

    def format(self, **kwargs: Any) -> str:
        return "List the ingredients you can see in this image."
