"""LLM prompt templates."""

from app.llm.prompts.base import BasePrompt
from app.llm.prompts.ingredient_recognition import (
    IngredientRecognitionPrompt,
    RecognizedIngredients,
)
from app.llm.prompts.recipe_extraction import (
    ExtractedIngredient,
    ExtractedRecipe,
    RecipeExtractionPrompt,
)


__all__ = [
    "BasePrompt",
    "ExtractedIngredient",
    "ExtractedRecipe",
    "IngredientRecognitionPrompt",
    "RecipeExtractionPrompt",
    "RecognizedIngredients",
]
