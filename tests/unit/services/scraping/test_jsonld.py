"""Unit tests for JSON-LD and meta tag recipe extraction."""

from __future__ import annotations

import pytest

from app.services.scraping.jsonld import (
    extract_jsonld_blocks,
    extract_largest_image,
    extract_meta_image,
    extract_recipe_from_html,
    find_recipe_node,
)
from app.services.scraping.models import ParsedIngredient


pytestmark = pytest.mark.unit

URL = "https://example.com/recipes/pancakes"


def _page(jsonld: str, head: str = "") -> str:
    return f"""
    <html>
    <head>
    {head}
    <script type="application/ld+json">{jsonld}</script>
    </head>
    <body></body>
    </html>
    """


class TestExtractJsonLdBlocks:
    """Tests for JSON-LD block parsing."""

    def test_parses_each_block(self) -> None:
        html = _page('{"@type": "Recipe", "name": "A"}') + _page('{"@type": "Thing"}')

        assert len(extract_jsonld_blocks(html)) == 2

    def test_skips_malformed_blocks(self) -> None:
        """Should ignore blocks that are not valid JSON."""
        assert extract_jsonld_blocks(_page("{not json")) == []

    def test_strips_comment_wrappers(self) -> None:
        """Should accept JSON wrapped in an HTML comment."""
        blocks = extract_jsonld_blocks(_page('<!-- {"@type": "Recipe"} -->'))

        assert blocks == [{"@type": "Recipe"}]


class TestFindRecipeNode:
    """Tests for locating the Recipe node."""

    def test_direct_node(self) -> None:
        node = {"@type": "Recipe", "name": "A"}

        assert find_recipe_node(node) is node

    def test_type_list(self) -> None:
        """Should match when Recipe is one of several types."""
        node = {"@type": ["Recipe", "NewsArticle"], "name": "A"}

        assert find_recipe_node(node) is node

    def test_graph(self) -> None:
        """Should search inside @graph."""
        recipe = {"@type": "Recipe", "name": "A"}
        node = {"@context": "https://schema.org", "@graph": [{"@type": "WebPage"}, recipe]}

        assert find_recipe_node(node) is recipe

    def test_top_level_list(self) -> None:
        recipe = {"@type": "recipe", "name": "A"}

        assert find_recipe_node([{"@type": "Organization"}, recipe]) is recipe

    def test_no_recipe(self) -> None:
        assert find_recipe_node({"@type": "Article"}) is None


class TestExtractRecipeFromHtml:
    """Tests for full-page extraction."""

    def test_extracts_basic_recipe(self) -> None:
        """Should map the schema.org fields."""
        html = _page(
            """
            {
                "@type": "Recipe",
                "name": "Pancakes",
                "description": "Fluffy",
                "recipeYield": "4 servings",
                "prepTime": "PT15M",
                "totalTime": "PT1H5M",
                "recipeCuisine": ["American"],
                "recipeCategory": "Breakfast",
                "recipeIngredient": ["2 cups flour", "2 eggs"],
                "recipeInstructions": [
                    {"@type": "HowToStep", "text": "Mix ingredients"},
                    {"@type": "HowToStep", "text": "Fry"}
                ],
                "nutrition": {"calories": "250 calories"},
                "image": {"url": "/img/pancakes.jpg"}
            }
            """
        )

        recipe = extract_recipe_from_html(html, URL)

        assert recipe is not None
        assert recipe.name == "Pancakes"
        assert recipe.description == "Fluffy"
        assert recipe.servings == 4
        assert recipe.cooking_time == 65
        assert recipe.cuisine == "American"
        assert recipe.category == "Breakfast"
        assert recipe.calories_per_serving == 250
        assert recipe.instructions == "Mix ingredients\nFry"
        assert recipe.image_url == "https://example.com/img/pancakes.jpg"
        assert recipe.source_url == URL
        assert recipe.ingredients[0] == ParsedIngredient(
            name="flour", quantity="2", unit="cups"
        )

    def test_flattens_how_to_sections(self) -> None:
        """Should read steps nested in HowToSection."""
        html = _page(
            """
            {
                "@type": "Recipe",
                "name": "Lasagna",
                "recipeInstructions": [
                    {
                        "@type": "HowToSection",
                        "name": "Sauce",
                        "itemListElement": [
                            {"@type": "HowToStep", "text": "Brown the beef"},
                            {"@type": "HowToStep", "text": "Add tomatoes"}
                        ]
                    },
                    {"@type": "HowToStep", "text": "Bake for 45 minutes"}
                ]
            }
            """
        )

        recipe = extract_recipe_from_html(html, URL)

        assert recipe is not None
        assert recipe.instructions == "Brown the beef\nAdd tomatoes\nBake for 45 minutes"
        assert recipe.cooking_time == 45

    def test_falls_back_to_meta_image(self) -> None:
        """Should use og:image when the node has no image."""
        html = _page(
            '{"@type": "Recipe", "name": "Soup"}',
            head='<meta property="og:image" content="https://cdn.example.com/soup.jpg">',
        )

        recipe = extract_recipe_from_html(html, URL)

        assert recipe is not None
        assert recipe.image_url == "https://cdn.example.com/soup.jpg"

    def test_title_fallback_needs_meta_image(self) -> None:
        """Should build a title-only recipe for pages with a meta image."""
        html = """
        <html><head>
        <title>Grandma's Stew</title>
        <meta content="/stew.jpg" property="og:image">
        </head></html>
        """

        recipe = extract_recipe_from_html(html, URL)

        assert recipe is not None
        assert recipe.name == "Grandma's Stew"
        assert recipe.image_url == "https://example.com/stew.jpg"

    def test_returns_none_without_recipe_or_image(self) -> None:
        html = "<html><head><title>About us</title></head></html>"

        assert extract_recipe_from_html(html, URL) is None

    def test_skips_nameless_recipe_nodes(self) -> None:
        assert extract_recipe_from_html(_page('{"@type": "Recipe"}'), URL) is None


class TestImages:
    """Tests for image discovery helpers."""

    def test_meta_image_prefers_open_graph(self) -> None:
        html = (
            '<meta name="twitter:image" content="/tw.jpg">'
            '<meta property="og:image" content="/og.jpg">'
        )

        assert extract_meta_image(html, URL) == "https://example.com/og.jpg"

    def test_largest_image_by_declared_size(self) -> None:
        html = (
            '<img src="/small.jpg" width="10" height="10">'
            '<img src="/big.jpg" width="800" height="600">'
        )

        assert extract_largest_image(html, URL) == "https://example.com/big.jpg"

    def test_largest_image_prefers_hero_class(self) -> None:
        html = '<img src="/icon.png"><img class="post-hero" src="/hero.jpg">'

        assert extract_largest_image(html, URL) == "https://example.com/hero.jpg"

    def test_ignores_data_uris(self) -> None:
        assert extract_largest_image('<img src="data:image/png;base64,xx">', URL) is None
