"""Ingredient catalog, recipe ingredient and pantry repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from app.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Record


class Ingredient(BaseModel):
    """A shared catalog ingredient."""

    id: int
    name: str
    category: str | None = None
    image_url: str | None = None
    created_at: datetime


class RecipeIngredient(BaseModel):
    """An ingredient line of a recipe, joined with the catalog name."""

    id: int
    recipe_id: int
    ingredient_id: int
    name: str
    category: str | None = None
    image_url: str | None = None
    quantity: str | None = None
    unit: str | None = None


class PantryItem(BaseModel):
    """An ingredient in a user's pantry, joined with the catalog name."""

    id: int
    user_id: int
    ingredient_id: int
    name: str
    category: str | None = None
    image_url: str | None = None
    quantity: str | None = None
    unit: str | None = None
    created_at: datetime


class IngredientRepository(BaseRepository):
    """Data access for ``ingredients``, ``recipe_ingredients`` and ``user_ingredients``."""

    async def list_all(self) -> list[Ingredient]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("SELECT * FROM ingredients ORDER BY name")
        return [Ingredient.model_validate(dict(row)) for row in rows]

    async def get_by_id(self, ingredient_id: int) -> Ingredient | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM ingredients WHERE id = $1", ingredient_id
            )
        return Ingredient.model_validate(dict(row)) if row else None

    async def get_or_create(
        self,
        name: str,
        category: str | None = None,
        image_url: str | None = None,
    ) -> Ingredient:
        """Return the ingredient named ``name``, creating it if needed.

        An existing ingredient without a category or image gets the
        supplied ones; stored values are never overwritten.
        """
        query = """
            INSERT INTO ingredients (name, category, image_url)
            VALUES ($1, $2, $3)
            ON CONFLICT (name) DO UPDATE SET
                category = COALESCE(ingredients.category, EXCLUDED.category),
                image_url = COALESCE(ingredients.image_url, EXCLUDED.image_url)
            RETURNING *
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, name, category, image_url)
        return Ingredient.model_validate(dict(row))

    async def update_image(self, ingredient_id: int, image_url: str) -> Ingredient | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "UPDATE ingredients SET image_url = $2 WHERE id = $1 RETURNING *",
                ingredient_id,
                image_url,
            )
        return Ingredient.model_validate(dict(row)) if row else None

    # -- recipe ingredients -------------------------------------------------

    async def add_recipe_ingredient(
        self,
        recipe_id: int,
        ingredient_id: int,
        quantity: str | None = None,
        unit: str | None = None,
    ) -> None:
        query = """
            INSERT INTO recipe_ingredients (recipe_id, ingredient_id, quantity, unit)
            VALUES ($1, $2, $3, $4)
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, recipe_id, ingredient_id, quantity, unit)

    async def list_recipe_ingredients(self, recipe_id: int) -> list[RecipeIngredient]:
        query = """
            SELECT ri.id, ri.recipe_id, ri.ingredient_id, i.name, i.category,
                   i.image_url, ri.quantity, ri.unit
            FROM recipe_ingredients ri
            JOIN ingredients i ON i.id = ri.ingredient_id
            WHERE ri.recipe_id = $1
            ORDER BY ri.id
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, recipe_id)
        return [RecipeIngredient.model_validate(dict(row)) for row in rows]

    # -- pantry -------------------------------------------------------------

    async def add_pantry_item(
        self,
        user_id: int,
        ingredient_id: int,
        quantity: str | None = None,
        unit: str | None = None,
    ) -> int:
        query = """
            INSERT INTO user_ingredients (user_id, ingredient_id, quantity, unit)
            VALUES ($1, $2, $3, $4)
            RETURNING id
        """
        async with self.pool.acquire() as conn:
            return await conn.fetchval(query, user_id, ingredient_id, quantity, unit)

    async def list_pantry(self, user_id: int) -> list[PantryItem]:
        query = """
            SELECT ui.id, ui.user_id, ui.ingredient_id, i.name, i.category,
                   i.image_url, ui.quantity, ui.unit, ui.created_at
            FROM user_ingredients ui
            JOIN ingredients i ON i.id = ui.ingredient_id
            WHERE ui.user_id = $1
            ORDER BY ui.created_at DESC, ui.id DESC
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, user_id)
        return [PantryItem.model_validate(dict(row)) for row in rows]

    async def get_pantry_owner(self, pantry_item_id: int) -> int | None:
        """Return the owning user ID of a pantry row, or ``None`` if missing."""
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                "SELECT user_id FROM user_ingredients WHERE id = $1", pantry_item_id
            )

    async def delete_pantry_item(self, pantry_item_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "DELETE FROM user_ingredients WHERE id = $1", pantry_item_id
            )
