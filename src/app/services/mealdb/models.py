"""TheMealDB response models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from app.services.scraping.parsing import split_measure


MAX_INGREDIENT_SLOTS = 20


class MealSummary(BaseModel):
    """A row from ``filter.php``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id_meal: str = Field(alias="idMeal")
    str_meal: str = Field(alias="strMeal")
    str_meal_thumb: str | None = Field(default=None, alias="strMealThumb")


class MealIngredient(BaseModel):
    name: str
    quantity: str | None = None
    unit: str | None = None


def meal_ingredients(meal: dict[str, Any]) -> list[MealIngredient]:
    """Collect ``strIngredient1..20`` with their ``strMeasure`` counterparts."""
    result = []
    for i in range(1, MAX_INGREDIENT_SLOTS + 1):
        name = meal.get(f"strIngredient{i}")
        if not isinstance(name, str) or not name.strip():
            continue
        measure = meal.get(f"strMeasure{i}")
        quantity, unit = split_measure(measure if isinstance(measure, str) else None)
        result.append(MealIngredient(name=name.strip(), quantity=quantity, unit=unit))
    return result
