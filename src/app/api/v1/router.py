"""API v1 router aggregating all endpoint routers.

Mounted under ``api.v1_prefix`` (``/api/v1``).
"""

from __future__ import annotations

from fastapi import APIRouter

from app.api.v1.endpoints import (
    auth,
    billing,
    cron,
    health,
    images,
    ingredients,
    messages,
    notifications,
    recipes,
    shopping_lists,
    users,
)


router = APIRouter()

router.include_router(health.router)
router.include_router(auth.router)
router.include_router(recipes.router)
router.include_router(ingredients.router)
router.include_router(shopping_lists.router)
router.include_router(notifications.router)
router.include_router(messages.router)
router.include_router(users.router)
router.include_router(billing.router)
router.include_router(cron.router)
router.include_router(images.router)
