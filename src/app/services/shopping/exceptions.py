"""Shopping list service exceptions."""

from __future__ import annotations


class ShoppingListError(Exception):
    """Base exception for shopping list operations."""


class ShoppingListNotFoundError(ShoppingListError):
    """The list, or the item's list, does not exist."""


class ShoppingListAccessDeniedError(ShoppingListError):
    """The list belongs to another user."""


class ShoppingListItemNotFoundError(ShoppingListError):
    """The list item does not exist."""


class IngredientNotFoundError(ShoppingListError):
    """An item referenced an unknown ingredient."""

    def __init__(self, ingredient_id: int) -> None:
        self.ingredient_id = ingredient_id
        super().__init__(f"Ingredient with ID {ingredient_id} not found")


class EmptyUpdateError(ShoppingListError):
    """An update request carried no fields."""
