"""API test fixtures.

The app is built with ``create_app()`` but its lifespan never runs; tests
place mock services on ``app.state`` and override the auth dependencies.
"""

from __future__ import annotations

from typing import TYPE_CHECKING
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.auth.dependencies import (
    get_current_user,
    get_current_user_optional,
    get_current_user_or_anonymous,
)
from app.factory import create_app


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

    from app.database.repositories.users import User


@pytest.fixture
def app(user: User) -> FastAPI:
    app = create_app()
    for dependency in (
        get_current_user,
        get_current_user_optional,
        get_current_user_or_anonymous,
    ):
        app.dependency_overrides[dependency] = lambda: user
    return app


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    async with AsyncClient(
        transport=ASGITransport(app=app, raise_app_exceptions=False),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def recipe_service(app: FastAPI) -> AsyncMock:
    app.state.recipe_service = AsyncMock()
    return app.state.recipe_service


@pytest.fixture
def ingredient_service(app: FastAPI) -> AsyncMock:
    app.state.ingredient_service = AsyncMock()
    return app.state.ingredient_service


@pytest.fixture
def storage_service(app: FastAPI) -> AsyncMock:
    service = AsyncMock()
    service.is_configured = True
    app.state.storage_service = service
    return service


@pytest.fixture
def shopping_list_service(app: FastAPI) -> AsyncMock:
    app.state.shopping_list_service = AsyncMock()
    return app.state.shopping_list_service


@pytest.fixture
def notification_service(app: FastAPI) -> AsyncMock:
    app.state.notification_service = AsyncMock()
    return app.state.notification_service


@pytest.fixture
def messaging_service(app: FastAPI) -> AsyncMock:
    app.state.messaging_service = AsyncMock()
    return app.state.messaging_service


@pytest.fixture
def billing_service(app: FastAPI) -> AsyncMock:
    service = AsyncMock()
    service.is_configured = True
    service.construct_event = MagicMock()
    app.state.billing_service = service
    return service


@pytest.fixture
def user_repository(app: FastAPI) -> AsyncMock:
    app.state.user_repository = AsyncMock()
    return app.state.user_repository


@pytest.fixture
def cook_nudge_service(app: FastAPI) -> AsyncMock:
    app.state.cook_nudge_service = AsyncMock()
    return app.state.cook_nudge_service


@pytest.fixture
def image_proxy(app: FastAPI) -> AsyncMock:
    app.state.image_proxy = AsyncMock()
    return app.state.image_proxy
