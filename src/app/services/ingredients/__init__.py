"""Ingredient service."""

from app.services.ingredients.service import IngredientService


__all__ = ["IngredientService"]
