from __future__ import annotations

import json

import pytest

from recipe_inbox.domain.models import ExtractedRecipe
from recipe_inbox.services.structured_data_extractor import (
    SchemaNodeKind,
    StructuredDataExtractor,
    classify_node,
    format_duration,
)

PAGE_URL = "https://example.com/recipes/pancakes"


def page(*blocks: str) -> str:
    scripts = "".join(f'<script type="application/ld+json">{block}</script>' for block in blocks)
    return f"<html><head>{scripts}</head><body><h1>Pancakes</h1></body></html>"


def recipe_node(**overrides) -> dict:
    node = {
        "@type": "Recipe",
        "name": "Fluffy Pancakes",
        "recipeIngredient": ["2 cups flour", "2 eggs", "1 1/2 cups milk"],
        "recipeInstructions": [
            {"@type": "HowToStep", "text": "Whisk the dry ingredients."},
            {"@type": "HowToStep", "text": "Add eggs and milk."},
        ],
        "prepTime": "PT10M",
        "cookTime": "PT20M",
        "recipeYield": ["4", "4 servings"],
        "author": {"@type": "Person", "name": "Grandma Jo"},
        "image": "https://example.com/pancakes.jpg",
    }
    node.update(overrides)
    return node


@pytest.fixture
def extractor() -> StructuredDataExtractor:
    return StructuredDataExtractor()


class TestFormatDuration:
    @pytest.mark.parametrize(
        "duration, expected",
        [
            ("PT1H30M", "1 hour 30 min"),
            ("PT2H", "2 hours"),
            ("PT1H", "1 hour"),
            ("PT45M", "45 min"),
            ("pt15m", "15 min"),
            ("", ""),
            ("soon", ""),
            ("PT", ""),
            (None, ""),
            (30, ""),
        ],
    )
    def test_format(self, duration, expected: str) -> None:
        assert format_duration(duration) == expected


class TestClassifyNode:
    def test_recipe_tag_wins_over_graph(self) -> None:
        assert classify_node({"@type": "Recipe", "@graph": []}) == SchemaNodeKind.RECIPE

    def test_recipe_in_type_list(self) -> None:
        assert classify_node({"@type": ["Recipe", "NewsArticle"]}) == SchemaNodeKind.RECIPE

    def test_graph_and_array(self) -> None:
        assert classify_node({"@graph": []}) == SchemaNodeKind.GRAPH
        assert classify_node([]) == SchemaNodeKind.ARRAY

    def test_everything_else_is_ignored(self) -> None:
        assert classify_node({"@type": "WebPage"}) == SchemaNodeKind.IGNORED
        assert classify_node("Recipe") == SchemaNodeKind.IGNORED
        assert classify_node(None) == SchemaNodeKind.IGNORED


class TestExtract:
    def test_full_recipe_node(self, extractor: StructuredDataExtractor) -> None:
        recipe = extractor.extract(page(json.dumps(recipe_node())), PAGE_URL)

        assert recipe is not None
        assert recipe.name == "Fluffy Pancakes"
        assert recipe.ingredients == "2 cups flour\n2 eggs\n1 1/2 cups milk"
        assert recipe.directions == "1. Whisk the dry ingredients.\n2. Add eggs and milk."
        assert recipe.prep_time == "10 min"
        assert recipe.cook_time == "20 min"
        assert recipe.servings == "4"
        assert recipe.source == "Grandma Jo"
        assert recipe.source_url == PAGE_URL
        assert recipe.notes == ""
        assert recipe.image_url == "https://example.com/pancakes.jpg"

    def test_graph_with_non_recipe_nodes_first(self, extractor: StructuredDataExtractor) -> None:
        block = json.dumps({
            "@context": "https://schema.org",
            "@graph": [
                {"@type": "WebSite", "name": "Example"},
                {"@type": "BreadcrumbList", "itemListElement": []},
                recipe_node(name="Graph Pancakes"),
            ],
        })

        recipe = extractor.extract(page(block), PAGE_URL)

        assert recipe is not None
        assert recipe.name == "Graph Pancakes"

    def test_broken_block_does_not_hide_later_recipe(self, extractor: StructuredDataExtractor) -> None:
        html = page('{"@type": "Recipe", "name": ', json.dumps(recipe_node()))

        recipe = extractor.extract(html, PAGE_URL)

        assert recipe is not None
        assert recipe.name == "Fluffy Pancakes"

    def test_no_recipe_node(self, extractor: StructuredDataExtractor) -> None:
        html = page(json.dumps({"@type": "Organization", "name": "Example"}))

        assert extractor.extract(html, PAGE_URL) is None

    def test_no_blocks(self, extractor: StructuredDataExtractor) -> None:
        assert extractor.extract("<html><body>No markup</body></html>", PAGE_URL) is None

    def test_nameless_recipe_is_skipped(self, extractor: StructuredDataExtractor) -> None:
        html = page(json.dumps([recipe_node(name=""), recipe_node(name="Second Try")]))

        recipe = extractor.extract(html, PAGE_URL)

        assert recipe is not None
        assert recipe.name == "Second Try"

    def test_html_entities_are_unescaped(self, extractor: StructuredDataExtractor) -> None:
        html = page(json.dumps(recipe_node(name="Mac &amp; Cheese", recipeIngredient=["1 cup &quot;elbow&quot; pasta"])))

        recipe = extractor.extract(html, PAGE_URL)

        assert recipe.name == "Mac & Cheese"
        assert recipe.ingredients == '1 cup "elbow" pasta'

    def test_list_name_uses_first_entry(self, extractor: StructuredDataExtractor) -> None:
        html = page(json.dumps(recipe_node(name=["Fluffy Pancakes", "Pancakes"])))

        recipe = extractor.extract(html, PAGE_URL)

        assert recipe.name == "Fluffy Pancakes"


class TestFieldShapes:
    def test_how_to_sections_are_flattened(self, extractor: StructuredDataExtractor) -> None:
        node = recipe_node(recipeInstructions=[
            {
                "@type": "HowToSection",
                "name": "Batter",
                "itemListElement": [
                    {"@type": "HowToStep", "text": "Mix flour and sugar."},
                    {"@type": "HowToStep", "text": "Fold in eggs."},
                ],
            },
            {
                "@type": "HowToSection",
                "name": "Cooking",
                "itemListElement": [{"@type": "HowToStep", "name": "Fry until golden."}],
            },
        ])

        recipe = extractor.resolve(node, PAGE_URL)

        assert recipe.directions == "1. Mix flour and sugar.\n2. Fold in eggs.\n3. Fry until golden."

    def test_plain_string_instructions(self, extractor: StructuredDataExtractor) -> None:
        recipe = extractor.resolve(recipe_node(recipeInstructions=["Mix.", "Bake."]), PAGE_URL)

        assert recipe.directions == "1. Mix.\n2. Bake."

    @pytest.mark.parametrize(
        "image, expected",
        [
            ("https://example.com/a.jpg", "https://example.com/a.jpg"),
            (["https://example.com/b.jpg", "https://example.com/c.jpg"], "https://example.com/b.jpg"),
            ([{"@type": "ImageObject", "url": "https://example.com/d.jpg"}], "https://example.com/d.jpg"),
            ({"@type": "ImageObject", "url": "https://example.com/e.jpg"}, "https://example.com/e.jpg"),
            ("", None),
            ([], None),
        ],
    )
    def test_image_shapes(self, extractor: StructuredDataExtractor, image, expected) -> None:
        recipe = extractor.resolve(recipe_node(image=image), PAGE_URL)

        assert recipe.image_url == expected

    @pytest.mark.parametrize(
        "author, expected",
        [
            ("Chef Ana", "Chef Ana"),
            ({"name": "Chef Ben"}, "Chef Ben"),
            ([{"name": "Chef Cy"}, {"name": "Chef Di"}], "Chef Cy"),
            (None, ""),
        ],
    )
    def test_author_shapes(self, extractor: StructuredDataExtractor, author, expected: str) -> None:
        recipe = extractor.resolve(recipe_node(author=author), PAGE_URL)

        assert recipe.source == expected

    def test_scalar_yield(self, extractor: StructuredDataExtractor) -> None:
        recipe = extractor.resolve(recipe_node(recipeYield=12), PAGE_URL)

        assert recipe.servings == "12"


class TestIsComplete:
    def test_complete(self) -> None:
        recipe = ExtractedRecipe(name="Soup", ingredients="water", directions="1. Boil.")

        assert StructuredDataExtractor.is_complete(recipe) is True

    def test_missing_directions(self) -> None:
        recipe = ExtractedRecipe(name="Soup", ingredients="water", directions="  ")

        assert StructuredDataExtractor.is_complete(recipe) is False

    def test_missing_ingredients(self) -> None:
        recipe = ExtractedRecipe(name="Soup", directions="1. Boil.")

        assert StructuredDataExtractor.is_complete(recipe) is False

    def test_none(self) -> None:
        assert StructuredDataExtractor.is_complete(None) is False
