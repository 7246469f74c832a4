"""Unit tests for shopping list export rendering."""

from __future__ import annotations

from datetime import UTC, datetime

import orjson
import pytest

from app.database.repositories.shopping_lists import ShoppingList, ShoppingListItem
from app.services.shopping.export import (
    ExportFormat,
    export_filename,
    export_shopping_list,
    render_csv,
    render_markdown,
    render_text,
)


pytestmark = pytest.mark.unit

CREATED = datetime(2024, 3, 5, 12, 0, tzinfo=UTC)


@pytest.fixture
def shopping_list() -> ShoppingList:
    return ShoppingList(
        id=1,
        user_id=1,
        name="Sunday Shop",
        description="For the roast",
        created_at=CREATED,
        updated_at=CREATED,
    )


@pytest.fixture
def items() -> list[ShoppingListItem]:
    return [
        ShoppingListItem(
            id=1,
            shopping_list_id=1,
            ingredient_id=3,
            name="Potatoes",
            category="vegetables",
            quantity="2",
            unit="kg",
            is_checked=True,
            created_at=CREATED,
        ),
        ShoppingListItem(
            id=2,
            shopping_list_id=1,
            ingredient_id=4,
            name="Salt",
            created_at=CREATED,
        ),
    ]


class TestExportFilename:
    def test_replaces_unsafe_characters(self) -> None:
        assert export_filename("Sunday Shop!", ExportFormat.CSV) == "sunday_shop_.csv"


class TestRenderers:
    """Tests for each export format."""

    def test_csv(self, shopping_list: ShoppingList, items: list[ShoppingListItem]) -> None:
        content = render_csv(shopping_list, items)

        assert content.splitlines() == [
            "# Sunday Shop",
            "# For the roast",
            "# Created: 3/5/2024",
            "",
            "Ingredient,Quantity,Unit,Checked",
            "Potatoes,2,kg,Yes",
            "Salt,,,No",
        ]

    def test_text(self, shopping_list: ShoppingList, items: list[ShoppingListItem]) -> None:
        content = render_text(shopping_list, items)

        assert content.startswith("Sunday Shop\n===========\n")
        assert "[✓] 1. Potatoes (2 kg)" in content
        assert "[ ] 2. Salt\n" in content
        assert "Total items: 2\nChecked: 1\nUnchecked: 1\n" in content

    def test_markdown(
        self, shopping_list: ShoppingList, items: list[ShoppingListItem]
    ) -> None:
        content = render_markdown(shopping_list, items)

        assert "**Created:** 3/5/2024" in content
        assert "- [x] Potatoes *(2 kg)*" in content
        assert "- [ ] Salt\n" in content
        assert "**Total items:** 2 | **Checked:** 1 | **Unchecked:** 1" in content

    def test_json(self, shopping_list: ShoppingList, items: list[ShoppingListItem]) -> None:
        exported = export_shopping_list(shopping_list, items, ExportFormat.JSON)

        payload = orjson.loads(exported.content)
        assert exported.mime_type == "application/json"
        assert payload["summary"] == {"total": 2, "checked": 1, "unchecked": 1}
        assert payload["items"][0] == {
            "name": "Potatoes",
            "category": "vegetables",
            "quantity": "2",
            "unit": "kg",
            "checked": True,
        }

    def test_no_description(self, shopping_list: ShoppingList) -> None:
        """Should omit the description line when there is none."""
        shopping_list.description = None

        assert render_csv(shopping_list, []).splitlines()[1] == "# Created: 3/5/2024"
