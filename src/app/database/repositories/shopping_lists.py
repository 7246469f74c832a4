"""Shopping list repository."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel

from app.database.repositories.base import BaseRepository


if TYPE_CHECKING:
    from collections.abc import Sequence

    from asyncpg import Record


class ShoppingList(BaseModel):
    """A shopping list row."""

    id: int
    user_id: int
    name: str
    description: str | None = None
    created_at: datetime
    updated_at: datetime


class ShoppingListItem(BaseModel):
    """A shopping list line, joined with the catalog ingredient."""

    id: int
    shopping_list_id: int
    ingredient_id: int
    name: str
    category: str | None = None
    quantity: str | None = None
    unit: str | None = None
    is_checked: bool = False
    created_at: datetime


class NewShoppingListItem(BaseModel):
    """Fields accepted when adding an item."""

    ingredient_id: int
    quantity: str | None = None
    unit: str | None = None


_ITEM_SELECT = """
    SELECT sli.id, sli.shopping_list_id, sli.ingredient_id, i.name, i.category,
           sli.quantity, sli.unit, sli.is_checked, sli.created_at
    FROM shopping_list_items sli
    JOIN ingredients i ON i.id = sli.ingredient_id
"""


class ShoppingListRepository(BaseRepository):
    """Data access for ``shopping_lists`` and ``shopping_list_items``."""

    async def create(self, user_id: int, name: str, description: str | None) -> int:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                """
                INSERT INTO shopping_lists (user_id, name, description)
                VALUES ($1, $2, $3)
                RETURNING id
                """,
                user_id,
                name,
                description,
            )

    async def list_by_user(self, user_id: int) -> list[ShoppingList]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM shopping_lists WHERE user_id = $1 ORDER BY created_at DESC, id DESC",
                user_id,
            )
        return [self._row_to_list(row) for row in rows]

    async def get_by_id(self, list_id: int) -> ShoppingList | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM shopping_lists WHERE id = $1", list_id
            )
        return self._row_to_list(row) if row else None

    async def update(
        self,
        list_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> ShoppingList | None:
        query = """
            UPDATE shopping_lists SET
                name = COALESCE($2, name),
                description = COALESCE($3, description),
                updated_at = now()
            WHERE id = $1
            RETURNING *
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, list_id, name, description)
        return self._row_to_list(row) if row else None

    async def delete(self, list_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute("DELETE FROM shopping_lists WHERE id = $1", list_id)

    async def add_item(self, list_id: int, item: NewShoppingListItem) -> int:
        async with self.pool.acquire() as conn:
            return await conn.fetchval(
                """
                INSERT INTO shopping_list_items (shopping_list_id, ingredient_id, quantity, unit)
                VALUES ($1, $2, $3, $4)
                RETURNING id
                """,
                list_id,
                item.ingredient_id,
                item.quantity,
                item.unit,
            )

    async def add_items(self, list_id: int, items: Sequence[NewShoppingListItem]) -> int:
        """Insert several items in one transaction and return how many were added."""
        if not items:
            return 0
        async with self.pool.acquire() as conn, conn.transaction():
            await conn.executemany(
                """
                INSERT INTO shopping_list_items (shopping_list_id, ingredient_id, quantity, unit)
                VALUES ($1, $2, $3, $4)
                """,
                [(list_id, i.ingredient_id, i.quantity, i.unit) for i in items],
            )
        return len(items)

    async def list_items(self, list_id: int) -> list[ShoppingListItem]:
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                _ITEM_SELECT + " WHERE sli.shopping_list_id = $1 ORDER BY sli.id",
                list_id,
            )
        return [ShoppingListItem.model_validate(dict(row)) for row in rows]

    async def get_item(self, item_id: int) -> ShoppingListItem | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(_ITEM_SELECT + " WHERE sli.id = $1", item_id)
        return ShoppingListItem.model_validate(dict(row)) if row else None

    async def set_item_checked(self, item_id: int, is_checked: bool) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE shopping_list_items SET is_checked = $2, updated_at = now() WHERE id = $1",
                item_id,
                is_checked,
            )

    async def delete_item(self, item_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute("DELETE FROM shopping_list_items WHERE id = $1", item_id)

    @staticmethod
    def _row_to_list(row: Record) -> ShoppingList:
        return ShoppingList.model_validate(dict(row))
