"""User account repository."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import orjson
from pydantic import BaseModel, Field

from app.database.repositories.base import BaseRepository
from app.observability.logging import get_logger


if TYPE_CHECKING:
    from asyncpg import Record

logger = get_logger(__name__)


class UserRole(StrEnum):
    """Account role."""

    USER = "user"
    ADMIN = "admin"


class User(BaseModel):
    """A user account row."""

    id: int
    open_id: str
    name: str | None = None
    email: str | None = None
    login_method: str | None = None
    role: UserRole = UserRole.USER
    dietary_preferences: list[str] = Field(default_factory=list)
    allergies: list[str] = Field(default_factory=list)
    goals: dict[str, Any] | None = None
    calorie_budget: int | None = None
    created_at: datetime
    updated_at: datetime
    last_signed_in: datetime


class UserPreferencesUpdate(BaseModel):
    """Partial preference update. ``None`` fields are left untouched."""

    dietary_preferences: list[str] | None = None
    allergies: list[str] | None = None
    goals: dict[str, Any] | None = None
    calorie_budget: int | None = None
    clear_calorie_budget: bool = False


def _load_json(raw: str | None, default: Any) -> Any:
    if not raw:
        return default
    try:
        return orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning("Ignoring malformed JSON column value")
        return default


def _dump_json(value: Any) -> str | None:
    if value is None:
        return None
    return orjson.dumps(value).decode()


class UserRepository(BaseRepository):
    """Data access for ``users``.

    Preference lists and goals are stored as JSON text columns.
    """

    async def get_by_id(self, user_id: int) -> User | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", user_id)
        return self._row_to_user(row) if row else None

    async def get_by_open_id(self, open_id: str) -> User | None:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                "SELECT * FROM users WHERE open_id = $1", open_id
            )
        return self._row_to_user(row) if row else None

    async def upsert(
        self,
        open_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        login_method: str | None = None,
        role: UserRole | None = None,
        last_signed_in: datetime | None = None,
    ) -> User:
        """Insert a user or update the given fields of an existing one.

        Fields passed as ``None`` keep their stored value on update.
        ``last_signed_in`` defaults to now.
        """
        query = """
            INSERT INTO users (open_id, name, email, login_method, role, last_signed_in)
            VALUES ($1, $2, $3, $4, COALESCE($5, 'user'), COALESCE($6, now()))
            ON CONFLICT (open_id) DO UPDATE SET
                name = COALESCE(EXCLUDED.name, users.name),
                email = COALESCE(EXCLUDED.email, users.email),
                login_method = COALESCE(EXCLUDED.login_method, users.login_method),
                role = COALESCE($5, users.role),
                last_signed_in = EXCLUDED.last_signed_in,
                updated_at = now()
            RETURNING *
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                open_id,
                name,
                email,
                login_method,
                role.value if role else None,
                last_signed_in,
            )
        return self._row_to_user(row)

    async def touch_last_signed_in(self, user_id: int) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute(
                "UPDATE users SET last_signed_in = now() WHERE id = $1", user_id
            )

    async def update_preferences(
        self, user_id: int, update: UserPreferencesUpdate
    ) -> User | None:
        """Apply a partial preferences update and return the updated user."""
        query = """
            UPDATE users SET
                dietary_preferences = COALESCE($2, dietary_preferences),
                allergies = COALESCE($3, allergies),
                goals = COALESCE($4, goals),
                calorie_budget = CASE
                    WHEN $6::boolean THEN NULL
                    ELSE COALESCE($5, calorie_budget)
                END,
                updated_at = now()
            WHERE id = $1
            RETURNING *
        """
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(
                query,
                user_id,
                _dump_json(update.dietary_preferences),
                _dump_json(update.allergies),
                _dump_json(update.goals),
                update.calorie_budget,
                update.clear_calorie_budget,
            )
        return self._row_to_user(row) if row else None

    @staticmethod
    def _row_to_user(row: Record) -> User:
        data = dict(row)
        data["dietary_preferences"] = _load_json(data.get("dietary_preferences"), [])
        data["allergies"] = _load_json(data.get("allergies"), [])
        data["goals"] = _load_json(data.get("goals"), None)
        return User.model_validate(data)
