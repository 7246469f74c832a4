"""FastAPI dependencies for service access.

Services are created during application startup and stored on
``app.state``. A service that failed to start is stored as ``None`` and
its endpoints answer 503.
"""

from __future__ import annotations

from typing import Any

from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import ServiceUnavailableException
from app.database.repositories.users import UserRepository
from app.services.billing import BillingService
from app.services.images import RecipeImageProxy
from app.services.ingredients import IngredientService
from app.services.messaging import MessagingService
from app.services.notifications import NotificationService
from app.services.nudges import CookNudgeService
from app.services.recipes import RecipeService
from app.services.shopping import ShoppingListService
from app.services.storage import StorageService


def _from_state(request: Request, attr: str, label: str) -> Any:
    service = getattr(request.app.state, attr, None)
    if service is None:
        raise ServiceUnavailableException(f"{label} not available")
    return service


def get_recipe_service(request: Request) -> RecipeService:
    return _from_state(request, "recipe_service", "Recipe service")


def get_ingredient_service(request: Request) -> IngredientService:
    return _from_state(request, "ingredient_service", "Ingredient service")


def get_storage_service(request: Request) -> StorageService:
    """Return the storage service; 503 when S3 is not configured."""
    service: StorageService = _from_state(request, "storage_service", "Storage")
    if not service.is_configured:
        raise ServiceUnavailableException("Image storage is not configured")
    return service


def get_shopping_list_service(request: Request) -> ShoppingListService:
    return _from_state(request, "shopping_list_service", "Shopping list service")


def get_notification_service(request: Request) -> NotificationService:
    return _from_state(request, "notification_service", "Notification service")


def get_messaging_service(request: Request) -> MessagingService:
    return _from_state(request, "messaging_service", "Messaging service")


def get_billing_service(request: Request) -> BillingService:
    """Return the billing service; 503 when Stripe is not configured."""
    service: BillingService = _from_state(request, "billing_service", "Billing")
    if not service.is_configured:
        raise ServiceUnavailableException("Stripe is not configured")
    return service


def get_cook_nudge_service(request: Request) -> CookNudgeService:
    return _from_state(request, "cook_nudge_service", "Cook nudge service")


def get_image_proxy(request: Request) -> RecipeImageProxy:
    return _from_state(request, "image_proxy", "Image proxy")


def get_user_repository(request: Request) -> UserRepository:
    return _from_state(request, "user_repository", "User repository")


def get_request_origin(request: Request) -> str:
    """Origin used to build Stripe return URLs.

    Prefers the ``Origin`` header, then the configured public URL.
    """
    origin = request.headers.get("origin")
    if origin:
        return origin.rstrip("/")
    return get_settings().app.public_url.rstrip("/")
