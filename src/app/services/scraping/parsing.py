"""Text helpers for turning scraped recipe fields into structured values."""

from __future__ import annotations

import re

from app.services.scraping.models import ParsedIngredient


MAX_COOKING_MINUTES = 1440

_ISO_DURATION = re.compile(
    r"^P(?:(\d+)D)?(?:T(?:(\d+)H)?(?:(\d+)M)?(?:(\d+(?:\.\d+)?)S)?)?$", re.IGNORECASE
)
_MINUTES_TEXT = re.compile(r"(\d+)\s*(?:min|minutes?)\b", re.IGNORECASE)
_FIRST_INT = re.compile(r"\d+")

_TIME_UNIT = r"(hours?|hrs?|minutes?|mins?)"
_RANGE = r"(\d+(?:\.\d+)?)\s*(?:-\s*(\d+(?:\.\d+)?)\s*)?"
_INSTRUCTION_TIME_PATTERNS = (
    re.compile(
        r"(?:bake|cook|roast|grill|simmer|boil|fry|saut[eé]|steam|microwave|heat|warm)"
        r"(?:\s+(?:for|about|approximately))?\s+" + _RANGE + _TIME_UNIT,
        re.IGNORECASE,
    ),
    re.compile(_RANGE + _TIME_UNIT + r"\s+(?:at|or|until)", re.IGNORECASE),
    re.compile(r"for\s+" + _RANGE + _TIME_UNIT, re.IGNORECASE),
)


def parse_duration_minutes(value: object) -> int | None:
    """Convert an ISO-8601 duration (``PT1H20M``) or ``"45 min"`` text to minutes.

    Seconds of 30 or more round up to the next minute. Zero durations
    return ``None``.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()

    match = _ISO_DURATION.match(text)
    if match:
        days, hours, minutes, seconds = (float(g) if g else 0 for g in match.groups())
        total = int(days * 1440 + hours * 60 + minutes) + (1 if seconds >= 30 else 0)
        return total or None

    match = _MINUTES_TEXT.search(text)
    if match:
        return int(match.group(1)) or None
    return None


def extract_cooking_time(instructions: str | None) -> int | None:
    """Longest "bake for N minutes" style time mentioned in the instructions.

    Ranges use their upper bound; values above 24 hours are ignored.
    """
    if not instructions:
        return None

    found: list[float] = []
    for pattern in _INSTRUCTION_TIME_PATTERNS:
        for low, high, unit in pattern.findall(instructions):
            value = float(high or low)
            minutes = value * 60 if unit.lower().startswith("h") else value
            if 0 < minutes <= MAX_COOKING_MINUTES:
                found.append(minutes)

    return round(max(found)) if found else None


def parse_servings(value: object) -> int | None:
    """First integer in a yield such as ``"4"``, ``"4-6 servings"`` or ``["8"]``."""
    if isinstance(value, list):
        value = value[0] if value else None
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return int(value) or None
    if isinstance(value, str):
        match = _FIRST_INT.search(value)
        if match:
            return int(match.group()) or None
    return None


def parse_ingredient_line(line: str) -> ParsedIngredient | None:
    """Split ``"2 cups flour"`` into quantity, unit and name.

    The first token is the quantity and the second the unit; lines with a
    single token are treated as a bare name.
    """
    parts = line.split()
    if not parts:
        return None
    if len(parts) == 1:
        return ParsedIngredient(name=parts[0])
    if len(parts) == 2:
        return ParsedIngredient(name=parts[1], quantity=parts[0])
    return ParsedIngredient(name=" ".join(parts[2:]), quantity=parts[0], unit=parts[1])


def split_measure(measure: str | None) -> tuple[str | None, str | None]:
    """Split ``"1 1/2 cups"`` style measures into (quantity, unit)."""
    if not measure or not measure.strip():
        return None, None
    quantity, _, unit = measure.strip().partition(" ")
    return quantity, unit.strip() or None


def join_instructions(value: object) -> str | None:
    """Normalize instructions given as text, a list of steps, or a step object."""
    if value is None:
        return None
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        steps = [step for step in (_step_text(item) for item in value) if step]
        return "\n".join(steps) or None
    if isinstance(value, dict):
        return _step_text(value)
    return str(value)


def _step_text(item: object) -> str | None:
    if isinstance(item, str):
        return item.strip() or None
    if isinstance(item, dict):
        for key in ("text", "name", "description"):
            value = item.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
    return None
