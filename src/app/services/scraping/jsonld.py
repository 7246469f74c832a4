"""schema.org Recipe extraction from JSON-LD and HTML meta tags.

Used when recipe-scrapers does not support a site.
"""

from __future__ import annotations

import re
from typing import Any
from urllib.parse import urljoin

import orjson

from app.observability.logging import get_logger
from app.services.scraping.models import ParsedIngredient, ParsedRecipe
from app.services.scraping.parsing import (
    extract_cooking_time,
    join_instructions,
    parse_duration_minutes,
    parse_ingredient_line,
    parse_servings,
)


logger = get_logger(__name__)

_JSONLD_BLOCK = re.compile(
    r"<script[^>]+type=[\"']application/ld\+json[\"'][^>]*>(.*?)</script>",
    re.DOTALL | re.IGNORECASE,
)
_TITLE = re.compile(r"<title[^>]*>([^<]+)</title>", re.IGNORECASE)
_IMG_TAG = re.compile(r"<img[^>]+src=[\"']([^\"']+)[\"'][^>]*>", re.IGNORECASE)
_HERO_CLASS = re.compile(
    r"class=[\"'][^\"']*(hero|feature|main|primary|banner|cover)[^\"']*[\"']",
    re.IGNORECASE,
)


def _meta_content(html: str, attr: str, value: str) -> str | None:
    """Content of ``<meta {attr}="{value}" content="...">`` in either attribute order."""
    patterns = (
        rf"<meta[^>]+{attr}=[\"']{re.escape(value)}[\"'][^>]+content=[\"']([^\"']+)[\"']",
        rf"<meta[^>]+content=[\"']([^\"']+)[\"'][^>]+{attr}=[\"']{re.escape(value)}[\"']",
    )
    for pattern in patterns:
        match = re.search(pattern, html, re.IGNORECASE)
        if match:
            return match.group(1).strip()
    return None


def extract_jsonld_blocks(html: str) -> list[Any]:
    """Parse every JSON-LD block, tolerating HTML comment wrappers."""
    blocks: list[Any] = []
    for raw in _JSONLD_BLOCK.findall(html):
        cleaned = raw.strip().removeprefix("<!--").removesuffix("-->").strip()
        if not cleaned:
            continue
        try:
            blocks.append(orjson.loads(cleaned))
        except orjson.JSONDecodeError:
            logger.debug("Skipping malformed JSON-LD block")
    return blocks


def find_recipe_node(node: Any) -> dict[str, Any] | None:
    """Depth-first search for a node whose ``@type`` is (or includes) Recipe."""
    if isinstance(node, list):
        for item in node:
            found = find_recipe_node(item)
            if found:
                return found
        return None
    if not isinstance(node, dict):
        return None

    schema_type = node.get("@type")
    types = schema_type if isinstance(schema_type, list) else [schema_type]
    if any(isinstance(t, str) and t.lower() == "recipe" for t in types):
        return node

    graph = node.get("@graph")
    if isinstance(graph, list):
        return find_recipe_node(graph)
    return None


def extract_meta_image(html: str, base_url: str) -> str | None:
    """Open Graph, Twitter card or ``name=image`` meta image, as an absolute URL."""
    for attr, value in (
        ("property", "og:image"),
        ("name", "twitter:image"),
        ("name", "image"),
    ):
        content = _meta_content(html, attr, value)
        if content:
            return urljoin(base_url, content)
    return None


def extract_largest_image(html: str, base_url: str) -> str | None:
    """Best-guess hero image: largest declared size, then hero-ish class names."""
    best: tuple[int, str] | None = None
    for match in _IMG_TAG.finditer(html):
        src = match.group(1)
        if src.startswith(("data:", "#")):
            continue
        tag = match.group(0)
        width = re.search(r"width=[\"']?(\d+)", tag, re.IGNORECASE)
        height = re.search(r"height=[\"']?(\d+)", tag, re.IGNORECASE)
        if width and height:
            size = int(width.group(1)) * int(height.group(1))
        else:
            size = 1_000_000 if _HERO_CLASS.search(tag) else 1000
        if best is None or size > best[0]:
            best = (size, urljoin(base_url, src))
    return best[1] if best else None


def _text(value: Any) -> str | None:
    if isinstance(value, str):
        return value.strip() or None
    if isinstance(value, list):
        parts = [v.strip() for v in value if isinstance(v, str) and v.strip()]
        return ", ".join(parts) or None
    return None


def _image(value: Any) -> str | None:
    if isinstance(value, str):
        return value
    if isinstance(value, list) and value:
        return _image(value[0])
    if isinstance(value, dict):
        url = value.get("url") or value.get("contentUrl")
        return url if isinstance(url, str) else None
    return None


def _ingredients(value: Any) -> list[ParsedIngredient]:
    if not isinstance(value, list):
        value = [value] if value else []
    result = []
    for item in value:
        line = item if isinstance(item, str) else _text(
            item.get("text") or item.get("name") if isinstance(item, dict) else None
        )
        if not line:
            continue
        parsed = parse_ingredient_line(line.strip())
        if parsed is not None:
            result.append(parsed)
    return result


def _instructions(value: Any) -> str | None:
    # HowToSection wraps its steps in itemListElement
    if isinstance(value, list):
        flattened: list[Any] = []
        for item in value:
            if isinstance(item, dict) and item.get("@type") == "HowToSection":
                flattened.extend(item.get("itemListElement") or [])
            else:
                flattened.append(item)
        value = flattened
    return join_instructions(value)


def recipe_from_jsonld(
    node: dict[str, Any], source_url: str, base_url: str
) -> ParsedRecipe | None:
    """Map a schema.org Recipe node onto ``ParsedRecipe``."""
    name = _text(node.get("name"))
    if not name:
        return None

    instructions = _instructions(node.get("recipeInstructions"))
    cooking_time = (
        parse_duration_minutes(node.get("totalTime"))
        or parse_duration_minutes(node.get("cookTime"))
        or parse_duration_minutes(node.get("prepTime"))
        or extract_cooking_time(instructions)
    )
    image = _image(node.get("image"))

    nutrition = node.get("nutrition")
    calories = None
    if isinstance(nutrition, dict):
        calories = parse_servings(nutrition.get("calories"))

    return ParsedRecipe(
        name=name,
        description=_text(node.get("description")),
        instructions=instructions,
        image_url=urljoin(base_url, image) if image else None,
        cuisine=_text(node.get("recipeCuisine")),
        category=_text(node.get("recipeCategory")),
        cooking_time=cooking_time,
        servings=parse_servings(node.get("recipeYield")),
        calories_per_serving=calories,
        source_url=source_url,
        ingredients=_ingredients(node.get("recipeIngredient")),
    )


def extract_recipe_from_html(
    html: str, source_url: str, base_url: str | None = None
) -> ParsedRecipe | None:
    """Extract a recipe from JSON-LD, falling back to page title and image.

    The title-only fallback is used when the page has no Recipe node but
    does have a meta image, which is typical of recipe blogs without
    structured data.
    """
    base_url = base_url or source_url
    meta_image = extract_meta_image(html, base_url)

    recipe: ParsedRecipe | None = None
    for block in extract_jsonld_blocks(html):
        node = find_recipe_node(block)
        if node is None:
            continue
        recipe = recipe_from_jsonld(node, source_url, base_url)
        if recipe is not None:
            break

    if recipe is None and meta_image:
        title_match = _TITLE.search(html)
        title = (
            title_match.group(1).strip()
            if title_match
            else _meta_content(html, "property", "og:title")
        )
        if title:
            recipe = ParsedRecipe(name=title, source_url=source_url)

    if recipe is None:
        return None
    if not recipe.image_url:
        recipe.image_url = meta_image or extract_largest_image(html, base_url)
    return recipe
