"""Model factories for generating test data."""

from tests.factories.models import (
    ConversationFactory,
    IngredientFactory,
    MessageFactory,
    NotificationFactory,
    RecipeFactory,
    ShoppingListFactory,
    ShoppingListItemFactory,
    SubscriptionFactory,
    UserFactory,
)


__all__ = [
    "ConversationFactory",
    "IngredientFactory",
    "MessageFactory",
    "NotificationFactory",
    "RecipeFactory",
    "ShoppingListFactory",
    "ShoppingListItemFactory",
    "SubscriptionFactory",
    "UserFactory",
]
