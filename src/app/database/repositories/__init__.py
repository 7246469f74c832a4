"""Database repositories."""

from app.database.repositories.billing import BillingRepository
from app.database.repositories.ingredients import IngredientRepository
from app.database.repositories.messages import MessageRepository
from app.database.repositories.notifications import (
    NotificationRepository,
    PushTokenRepository,
)
from app.database.repositories.recipes import RecipeRepository
from app.database.repositories.shopping_lists import ShoppingListRepository
from app.database.repositories.users import UserRepository


__all__ = [
    "BillingRepository",
    "IngredientRepository",
    "MessageRepository",
    "NotificationRepository",
    "PushTokenRepository",
    "RecipeRepository",
    "ShoppingListRepository",
    "UserRepository",
]
