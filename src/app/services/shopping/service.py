"""Shopping list operations.

Every operation takes the caller's user id and checks list ownership
before touching the list or its items.
"""

from __future__ import annotations

from app.database.repositories.ingredients import IngredientRepository
from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.shopping_lists import (
    NewShoppingListItem,
    ShoppingList,
    ShoppingListItem,
    ShoppingListRepository,
)
from app.observability.logging import get_logger
from app.services.recipes.exceptions import (
    RecipeAccessDeniedError,
    RecipeNotFoundError,
)
from app.services.shopping.exceptions import (
    EmptyUpdateError,
    IngredientNotFoundError,
    ShoppingListAccessDeniedError,
    ShoppingListItemNotFoundError,
    ShoppingListNotFoundError,
)
from app.services.shopping.export import ExportedList, ExportFormat, export_shopping_list


logger = get_logger(__name__)


class ShoppingListService:
    def __init__(
        self,
        lists: ShoppingListRepository | None = None,
        ingredients: IngredientRepository | None = None,
        recipes: RecipeRepository | None = None,
    ) -> None:
        self._lists = lists or ShoppingListRepository()
        self._ingredients = ingredients or IngredientRepository()
        self._recipes = recipes or RecipeRepository()

    async def get_owned(self, user_id: int, list_id: int) -> ShoppingList:
        """Load a list owned by ``user_id``.

        Raises:
            ShoppingListNotFoundError: No such list.
            ShoppingListAccessDeniedError: The list belongs to someone else.
        """
        shopping_list = await self._lists.get_by_id(list_id)
        if shopping_list is None:
            raise ShoppingListNotFoundError("Shopping list not found")
        if shopping_list.user_id != user_id:
            raise ShoppingListAccessDeniedError(
                "Unauthorized: You can only access your own shopping lists"
            )
        return shopping_list

    async def _get_owned_item(self, user_id: int, item_id: int) -> ShoppingListItem:
        item = await self._lists.get_item(item_id)
        if item is None:
            raise ShoppingListItemNotFoundError("Shopping list item not found")
        await self.get_owned(user_id, item.shopping_list_id)
        return item

    async def list_lists(self, user_id: int) -> list[ShoppingList]:
        return await self._lists.list_by_user(user_id)

    async def create_list(self, user_id: int, name: str, description: str | None) -> int:
        list_id = await self._lists.create(user_id, name, description)
        logger.info("Shopping list created", list_id=list_id)
        return list_id

    async def list_items(self, user_id: int, list_id: int) -> list[ShoppingListItem]:
        await self.get_owned(user_id, list_id)
        return await self._lists.list_items(list_id)

    async def add_item(
        self,
        user_id: int,
        list_id: int,
        ingredient_id: int,
        quantity: str | None = None,
        unit: str | None = None,
    ) -> int:
        await self.get_owned(user_id, list_id)
        if await self._ingredients.get_by_id(ingredient_id) is None:
            raise IngredientNotFoundError(ingredient_id)
        return await self._lists.add_item(
            list_id,
            NewShoppingListItem(ingredient_id=ingredient_id, quantity=quantity, unit=unit),
        )

    async def set_item_checked(self, user_id: int, item_id: int, is_checked: bool) -> None:
        await self._get_owned_item(user_id, item_id)
        await self._lists.set_item_checked(item_id, is_checked)

    async def remove_item(self, user_id: int, item_id: int) -> None:
        await self._get_owned_item(user_id, item_id)
        await self._lists.delete_item(item_id)

    async def update_list(
        self,
        user_id: int,
        list_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> ShoppingList:
        if name is None and description is None:
            raise EmptyUpdateError("No updates provided")
        await self.get_owned(user_id, list_id)
        updated = await self._lists.update(list_id, name=name, description=description)
        if updated is None:
            raise ShoppingListNotFoundError("Shopping list not found")
        return updated

    async def delete_list(self, user_id: int, list_id: int) -> None:
        await self.get_owned(user_id, list_id)
        await self._lists.delete(list_id)

    async def add_from_recipe(self, user_id: int, list_id: int, recipe_id: int) -> int:
        """Copy every ingredient of a recipe onto the list; returns how many."""
        await self.get_owned(user_id, list_id)
        recipe = await self._recipes.get_by_id(recipe_id)
        if recipe is None:
            raise RecipeNotFoundError(f"Recipe {recipe_id} not found")
        if recipe.user_id != user_id:
            raise RecipeAccessDeniedError(
                "Unauthorized: You can only add ingredients from your own recipes"
            )

        ingredients = await self._ingredients.list_recipe_ingredients(recipe_id)
        added = await self._lists.add_items(
            list_id,
            [
                NewShoppingListItem(
                    ingredient_id=ri.ingredient_id, quantity=ri.quantity, unit=ri.unit
                )
                for ri in ingredients
            ],
        )
        logger.info("Added recipe to shopping list", list_id=list_id, items=added)
        return added

    async def export_list(
        self, user_id: int, list_id: int, fmt: ExportFormat
    ) -> ExportedList:
        shopping_list = await self.get_owned(user_id, list_id)
        items = await self._lists.list_items(list_id)
        return export_shopping_list(shopping_list, items, fmt)
