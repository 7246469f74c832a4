"""Render a shopping list as CSV, plain text, Markdown or JSON."""

from __future__ import annotations

import csv
import io
import re
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING

import orjson


if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from app.database.repositories.shopping_lists import ShoppingList, ShoppingListItem


class ExportFormat(StrEnum):
    CSV = "csv"
    TXT = "txt"
    MD = "md"
    JSON = "json"


MIME_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.TXT: "text/plain",
    ExportFormat.MD: "text/markdown",
    ExportFormat.JSON: "application/json",
}

_RULE = "-" * 50
_UNSAFE_FILENAME = re.compile(r"[^a-z0-9]", re.IGNORECASE)


@dataclass(frozen=True)
class ExportedList:
    content: str
    mime_type: str
    filename: str


def export_filename(list_name: str, fmt: ExportFormat) -> str:
    """``"Sunday Shop!"`` -> ``"sunday_shop_.csv"``."""
    return f"{_UNSAFE_FILENAME.sub('_', list_name).lower()}.{fmt.value}"


def _display_date(value: datetime) -> str:
    return f"{value.month}/{value.day}/{value.year}"


def _quantity_unit(item: ShoppingListItem) -> str:
    return " ".join(part for part in (item.quantity, item.unit) if part)


def _counts(items: Sequence[ShoppingListItem]) -> tuple[int, int, int]:
    checked = sum(1 for item in items if item.is_checked)
    return len(items), checked, len(items) - checked


def render_csv(shopping_list: ShoppingList, items: Sequence[ShoppingListItem]) -> str:
    buffer = io.StringIO()
    buffer.write(f"# {shopping_list.name}\n")
    if shopping_list.description:
        buffer.write(f"# {shopping_list.description}\n")
    buffer.write(f"# Created: {_display_date(shopping_list.created_at)}\n\n")

    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(["Ingredient", "Quantity", "Unit", "Checked"])
    for item in items:
        writer.writerow(
            [item.name, item.quantity or "", item.unit or "", "Yes" if item.is_checked else "No"]
        )
    return buffer.getvalue().rstrip("\n")


def render_text(shopping_list: ShoppingList, items: Sequence[ShoppingListItem]) -> str:
    lines = [shopping_list.name, "=" * len(shopping_list.name), ""]
    if shopping_list.description:
        lines += [shopping_list.description, ""]
    lines += [
        f"Created: {_display_date(shopping_list.created_at)}",
        "",
        "Shopping List:",
        _RULE,
        "",
    ]
    for index, item in enumerate(items, start=1):
        box = "[✓]" if item.is_checked else "[ ]"
        amount = _quantity_unit(item)
        suffix = f" ({amount})" if amount else ""
        lines.append(f"{box} {index}. {item.name}{suffix}")

    total, checked, unchecked = _counts(items)
    lines += [
        "",
        _RULE,
        f"Total items: {total}",
        f"Checked: {checked}",
        f"Unchecked: {unchecked}",
    ]
    return "\n".join(lines) + "\n"


def render_markdown(shopping_list: ShoppingList, items: Sequence[ShoppingListItem]) -> str:
    lines = [f"# {shopping_list.name}", ""]
    if shopping_list.description:
        lines += [shopping_list.description, ""]
    lines += [
        f"**Created:** {_display_date(shopping_list.created_at)}",
        "",
        "## Shopping List",
        "",
    ]
    for item in items:
        box = "[x]" if item.is_checked else "[ ]"
        amount = _quantity_unit(item)
        suffix = f" *({amount})*" if amount else ""
        lines.append(f"- {box} {item.name}{suffix}")

    total, checked, unchecked = _counts(items)
    lines += [
        "",
        "---",
        "",
        f"**Total items:** {total} | **Checked:** {checked} | **Unchecked:** {unchecked}",
    ]
    return "\n".join(lines) + "\n"


def render_json(shopping_list: ShoppingList, items: Sequence[ShoppingListItem]) -> str:
    total, checked, unchecked = _counts(items)
    payload = {
        "name": shopping_list.name,
        "description": shopping_list.description,
        "createdAt": shopping_list.created_at.isoformat(),
        "items": [
            {
                "name": item.name,
                "category": item.category,
                "quantity": item.quantity,
                "unit": item.unit,
                "checked": item.is_checked,
            }
            for item in items
        ],
        "summary": {"total": total, "checked": checked, "unchecked": unchecked},
    }
    return orjson.dumps(payload, option=orjson.OPT_INDENT_2).decode()


_RENDERERS: dict[
    ExportFormat, Callable[[ShoppingList, Sequence[ShoppingListItem]], str]
] = {
    ExportFormat.CSV: render_csv,
    ExportFormat.TXT: render_text,
    ExportFormat.MD: render_markdown,
    ExportFormat.JSON: render_json,
}


def export_shopping_list(
    shopping_list: ShoppingList,
    items: Sequence[ShoppingListItem],
    fmt: ExportFormat,
) -> ExportedList:
    return ExportedList(
        content=_RENDERERS[fmt](shopping_list, items),
        mime_type=MIME_TYPES[fmt],
        filename=export_filename(shopping_list.name, fmt),
    )
