"""Ingredient catalogue, pantry and photo recognition."""

from __future__ import annotations

from typing import TYPE_CHECKING

from app.database.repositories.ingredients import (
    Ingredient,
    IngredientRepository,
    PantryItem,
)
from app.llm.exceptions import LLMError
from app.llm.prompts import IngredientRecognitionPrompt
from app.observability.logging import get_logger
from app.services.ingredients.exceptions import (
    IngredientNotFoundError,
    PantryAccessDeniedError,
    PantryItemNotFoundError,
    RecognitionError,
)


if TYPE_CHECKING:
    from app.llm.client.chat import ChatCompletionClient


logger = get_logger(__name__)


class IngredientService:
    def __init__(
        self,
        ingredients: IngredientRepository | None = None,
        llm_client: ChatCompletionClient | None = None,
    ) -> None:
        self._ingredients = ingredients or IngredientRepository()
        self._llm_client = llm_client

    async def list_ingredients(self) -> list[Ingredient]:
        return await self._ingredients.list_all()

    async def get_or_create(
        self,
        name: str,
        category: str | None = None,
        image_url: str | None = None,
    ) -> Ingredient:
        """Find or create by name; an image is only stored if none is set."""
        return await self._ingredients.get_or_create(name, category, image_url)

    async def update_image(self, ingredient_id: int, image_url: str) -> Ingredient:
        ingredient = await self._ingredients.update_image(ingredient_id, image_url)
        if ingredient is None:
            raise IngredientNotFoundError("Ingredient not found")
        return ingredient

    async def recognize_from_image(self, image_url: str) -> list[str]:
        """Names of the ingredients the vision model sees in the image.

        Raises:
            RecognitionError: No LLM is configured or the call failed.
        """
        if self._llm_client is None:
            raise RecognitionError("Image recognition is not available")
        try:
            result = await self._llm_client.run_prompt(
                IngredientRecognitionPrompt(), image_url=image_url
            )
        except LLMError as e:
            logger.warning("Ingredient recognition failed", error=str(e))
            raise RecognitionError("Failed to recognize ingredients") from e
        names = [name.strip() for name in result.ingredients if name.strip()]
        logger.info("Recognized ingredients", count=len(names))
        return names

    # -- pantry -------------------------------------------------------------

    async def add_to_pantry(
        self,
        user_id: int,
        ingredient_id: int,
        quantity: str | None = None,
        unit: str | None = None,
    ) -> int:
        if await self._ingredients.get_by_id(ingredient_id) is None:
            raise IngredientNotFoundError(f"Ingredient with ID {ingredient_id} not found")
        return await self._ingredients.add_pantry_item(
            user_id, ingredient_id, quantity, unit
        )

    async def list_pantry(self, user_id: int) -> list[PantryItem]:
        return await self._ingredients.list_pantry(user_id)

    async def remove_from_pantry(self, user_id: int, pantry_item_id: int) -> None:
        owner = await self._ingredients.get_pantry_owner(pantry_item_id)
        if owner is None:
            raise PantryItemNotFoundError("Pantry item not found")
        if owner != user_id:
            raise PantryAccessDeniedError("Unauthorized: not your pantry item")
        await self._ingredients.delete_pantry_item(pantry_item_id)
