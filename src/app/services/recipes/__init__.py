"""Recipe service."""

from app.services.recipes.service import RecipeService


__all__ = ["RecipeService"]
