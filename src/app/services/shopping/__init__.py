"""Shopping list service and exports."""

from app.services.shopping.export import ExportFormat
from app.services.shopping.service import ShoppingListService


__all__ = ["ExportFormat", "ShoppingListService"]
