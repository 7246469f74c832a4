"""Recipe repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from app.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from asyncpg import Record


class Recipe(BaseModel):
    """A saved recipe row."""

    id: int
    user_id: int
    external_id: str | None = None
    name: str
    description: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    cuisine: str | None = None
    category: str | None = None
    cooking_time: int | None = None
    servings: int | None = None
    calories_per_serving: int | None = None
    source_url: str | None = None
    source: str = "user_import"
    is_favorite: bool = False
    is_shared: bool = False
    cooked_at: datetime | None = None
    cooked_count: int = 0
    cook_nudge_sent_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class NewRecipe(BaseModel):
    """Fields accepted when inserting a recipe."""

    user_id: int
    name: str
    description: str | None = None
    instructions: str | None = None
    image_url: str | None = None
    cuisine: str | None = None
    category: str | None = None
    cooking_time: int | None = None
    servings: int | None = None
    calories_per_serving: int | None = None
    source_url: str | None = None
    source: str = "user_import"
    external_id: str | None = None


class NudgeCandidate(BaseModel):
    """A recipe eligible for a cook-nudge push."""

    id: int
    user_id: int
    name: str


class RecipeRepository(BaseRepository):
    """Data access for ``recipes``."""

    async def create(self, recipe: NewRecipe) -> int:
        """Insert a recipe and return its ID."""
        query = """
            INSERT INTO recipes (
                user_id, name, description, instructions, image_url, cuisine,
                category, cooking_time, servings, calories_per_serving,
                source_url, source, external_id
            )
            VALUES ($1, $2, $3, $4, $5, $6, $7, $8, $9, $10, $11, $12, $13)
            RETURNING id
        """
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                query,
                recipe.user_id,
                recipe.name,
                recipe.description,
                recipe.instructions,
                recipe.image_url,
                recipe.cuisine,
                recipe.category,
                recipe.cooking_time,
                recipe.servings,
                recipe.calories_per_serving,
                recipe.source_url,
                recipe.source,
                recipe.external_id,
            )

    async def get_by_id(self, recipe_id: int) -> Recipe | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM recipes WHERE id = $1", recipe_id)
        return self._row_to_recipe(row) if row else None

    async def list_by_user(self, user_id: int) -> list[Recipe]:
        """All of a user's recipes, newest first."""
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM recipes WHERE user_id = $1 ORDER BY created_at DESC, id DESC",
                user_id,
            )
        return [self._row_to_recipe(row) for row in rows]

    async def set_favorite(self, recipe_id: int, is_favorite: bool) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE recipes SET is_favorite = $2, updated_at = now() WHERE id = $1",
                recipe_id,
                is_favorite,
            )

    async def mark_cooked(self, recipe_id: int) -> Recipe | None:
        query = """
            UPDATE recipes
            SET cooked_at = now(), cooked_count = cooked_count + 1, updated_at = now()
            WHERE id = $1
            RETURNING *
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, recipe_id)
        return self._row_to_recipe(row) if row else None

    async def delete(self, recipe_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute("DELETE FROM recipes WHERE id = $1", recipe_id)

    async def list_nudge_candidates(self, created_before: datetime) -> list[NudgeCandidate]:
        """Recipes saved before ``created_before``, never cooked and never nudged."""
        query = """
            SELECT id, user_id, name
            FROM recipes
            WHERE created_at <= $1
              AND cooked_at IS NULL
              AND cook_nudge_sent_at IS NULL
            ORDER BY created_at
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, created_before)
        return [NudgeCandidate.model_validate(dict(row)) for row in rows]

    async def mark_nudge_sent(self, recipe_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE recipes SET cook_nudge_sent_at = now() WHERE id = $1",
                recipe_id,
            )

    @staticmethod
    def _row_to_recipe(row: Record) -> Recipe:
        return Recipe.model_validate(dict(row))
