"""Recipe image proxy."""

from app.services.images.service import ProxiedImage, RecipeImageProxy


__all__ = ["ProxiedImage", "RecipeImageProxy"]
