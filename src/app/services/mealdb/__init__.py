"""TheMealDB integration."""

from app.services.mealdb.client import MealDBClient


__all__ = ["MealDBClient"]
