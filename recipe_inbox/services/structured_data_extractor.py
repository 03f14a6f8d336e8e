"""
Structured data extractor for schema.org Recipe markup.

Walks every JSON-LD block in a page looking for a Recipe node. Blocks are
parsed independently, so one broken block never hides a recipe in another.
No network I/O happens here.
"""
import html as html_lib
import json
import logging
import re
from enum import Enum
from typing import Any, Dict, List, Optional

from bs4 import BeautifulSoup

from recipe_inbox.domain.models import ExtractedRecipe

logger = logging.getLogger(__name__)

RECIPE_TYPE = "Recipe"
GRAPH_KEY = "@graph"
TYPE_KEY = "@type"

DURATION_PATTERN = re.compile(r'PT(?:(\d+)H)?(?:(\d+)M)?', re.IGNORECASE)


class SchemaNodeKind(str, Enum):
    """Shapes a parsed JSON-LD value can take during the walk"""
    RECIPE = "recipe"    # Object tagged Recipe, extract fields
    GRAPH = "graph"      # Object wrapping other nodes under @graph, recurse
    ARRAY = "array"      # List of nodes, recurse in order
    IGNORED = "ignored"  # Anything else


def classify_node(value: Any) -> SchemaNodeKind:
    """
    Decide how the walk treats a JSON-LD value.

    A Recipe tag wins over a @graph key on the same object.
    """
    if isinstance(value, list):
        return SchemaNodeKind.ARRAY
    if not isinstance(value, dict):
        return SchemaNodeKind.IGNORED

    node_type = value.get(TYPE_KEY)
    if node_type == RECIPE_TYPE or (isinstance(node_type, list) and RECIPE_TYPE in node_type):
        return SchemaNodeKind.RECIPE
    if GRAPH_KEY in value:
        return SchemaNodeKind.GRAPH
    return SchemaNodeKind.IGNORED


def format_duration(duration: Any) -> str:
    """
    Format an ISO 8601 duration (PT1H30M) as readable text.

    Examples:
        "PT1H30M" -> "1 hour 30 min"
        "PT2H"    -> "2 hours"
        "PT45M"   -> "45 min"
        "", "soon", None -> ""
    """
    if not isinstance(duration, str) or not duration.strip():
        return ""

    match = DURATION_PATTERN.match(duration.strip())
    if not match:
        return ""

    hours = int(match.group(1)) if match.group(1) else 0
    minutes = int(match.group(2)) if match.group(2) else 0
    hour_text = f"{hours} hour{'s' if hours > 1 else ''}"

    if hours and minutes:
        return f"{hour_text} {minutes} min"
    if hours:
        return hour_text
    if minutes:
        return f"{minutes} min"
    return ""


def _clean_text(value: Any) -> str:
    if isinstance(value, list):
        value = next((item for item in value if isinstance(item, str) and item.strip()), None)
    if value is None:
        return ""
    return html_lib.unescape(str(value)).strip()


class StructuredDataExtractor:
    """Extract a recipe from schema.org JSON-LD embedded in HTML"""

    def extract(self, html: str, source_url: str) -> Optional[ExtractedRecipe]:
        """
        Find the first usable Recipe node across all JSON-LD blocks.

        Args:
            html: Raw page HTML
            source_url: Page URL, copied into the record

        Returns:
            ExtractedRecipe (possibly incomplete) or None if no Recipe node exists
        """
        for block in self.extract_blocks(html):
            try:
                data = json.loads(block)
            except json.JSONDecodeError:
                logger.debug("Skipping unparseable JSON-LD block")
                continue

            recipe = self.resolve(data, source_url)
            if recipe and not recipe.is_declined:
                logger.info(f"Found recipe in JSON-LD schema: {recipe.name}")
                return recipe

        return None

    def extract_blocks(self, html: str) -> List[str]:
        """Return the text of every application/ld+json script block, in page order"""
        soup = BeautifulSoup(html, 'html.parser')
        blocks = []
        for script in soup.find_all('script', attrs={'type': re.compile(r'^\s*application/ld\+json\s*$', re.I)}):
            text = script.string if script.string is not None else script.get_text()
            if text and text.strip():
                blocks.append(text)
        return blocks

    def resolve(self, data: Any, source_url: str) -> Optional[ExtractedRecipe]:
        """
        Recursively resolve a parsed JSON-LD value to a recipe.

        Args:
            data: Parsed JSON value
            source_url: Page URL

        Returns:
            ExtractedRecipe from the first Recipe node with a title, or None
        """
        kind = classify_node(data)

        if kind == SchemaNodeKind.ARRAY:
            for item in data:
                recipe = self.resolve(item, source_url)
                if recipe and not recipe.is_declined:
                    return recipe
            return None

        if kind == SchemaNodeKind.GRAPH:
            return self.resolve(data[GRAPH_KEY], source_url)

        if kind == SchemaNodeKind.RECIPE:
            return self._recipe_from_node(data, source_url)

        return None

    @staticmethod
    def is_complete(recipe: Optional[ExtractedRecipe]) -> bool:
        """A structured match is accepted only with both ingredients and directions"""
        return bool(recipe and recipe.ingredients.strip() and recipe.directions.strip())

    # ========================================
    # Field extraction
    # ========================================

    def _recipe_from_node(self, node: Dict[str, Any], source_url: str) -> Optional[ExtractedRecipe]:
        name = _clean_text(node.get('name'))
        if not name:
            return None

        return ExtractedRecipe(
            name=name,
            ingredients=self._extract_ingredients(node.get('recipeIngredient')),
            directions=self._extract_directions(node.get('recipeInstructions')),
            prep_time=format_duration(node.get('prepTime')),
            cook_time=format_duration(node.get('cookTime')),
            servings=self._extract_servings(node.get('recipeYield')),
            source=self._extract_author(node.get('author')),
            source_url=source_url,
            notes="",
            image_url=self._extract_image(node.get('image')),
        )

    def _extract_ingredients(self, ingredients: Any) -> str:
        if isinstance(ingredients, str):
            return _clean_text(ingredients)
        if not isinstance(ingredients, list):
            return ""
        lines = [_clean_text(item) for item in ingredients]
        return "\n".join(line for line in lines if line)

    def _extract_directions(self, instructions: Any) -> str:
        steps = self._collect_steps(instructions)
        return "\n".join(f"{index}. {step}" for index, step in enumerate(steps, start=1))

    def _collect_steps(self, instructions: Any) -> List[str]:
        """Flatten strings, HowToStep objects and HowToSection lists into step texts"""
        if isinstance(instructions, str):
            text = _clean_text(instructions)
            return [text] if text else []

        if isinstance(instructions, dict):
            if 'itemListElement' in instructions:
                return self._collect_steps(instructions['itemListElement'])
            text = _clean_text(instructions.get('text') or instructions.get('name'))
            return [text] if text else []

        if isinstance(instructions, list):
            steps = []
            for item in instructions:
                steps.extend(self._collect_steps(item))
            return steps

        return []

    def _extract_servings(self, servings: Any) -> str:
        if isinstance(servings, list):
            return _clean_text(servings[0]) if servings else ""
        return _clean_text(servings)

    def _extract_image(self, image: Any) -> Optional[str]:
        """
        Image can be a string, a list of strings, a list of ImageObjects,
        or a single ImageObject.
        """
        if isinstance(image, list):
            image = image[0] if image else None
        if isinstance(image, dict):
            image = image.get('url')
        if isinstance(image, str) and image.strip():
            return image.strip()
        return None

    def _extract_author(self, author: Any) -> str:
        if isinstance(author, list):
            author = author[0] if author else None
        if isinstance(author, dict):
            return _clean_text(author.get('name'))
        if isinstance(author, str):
            return _clean_text(author)
        return ""
