"""Recipe scraping from web pages."""

from app.services.scraping.models import ParsedIngredient, ParsedRecipe
from app.services.scraping.service import RecipeScraperService


__all__ = ["ParsedIngredient", "ParsedRecipe", "RecipeScraperService"]
