"""
Recipe normalizer.

Coerces whatever the generative service returned into an ExtractedRecipe and
turns sentinel-named records into explicit declines.
"""
import logging
from typing import Any, Dict, Mapping

from recipe_inbox.domain.enums import SentinelName
from recipe_inbox.domain.models import Declined, Extracted, ExtractedRecipe, ExtractionOutcome

logger = logging.getLogger(__name__)

DEFAULT_RECIPE_NAME = "Untitled Recipe"

TEXT_FIELDS = (
    "ingredients",
    "directions",
    "prep_time",
    "cook_time",
    "servings",
    "source",
    "source_url",
    "notes",
)


def coerce_text(value: Any) -> str:
    """
    Coerce a loosely typed JSON value to text.

    None becomes "", lists are joined one item per line, everything else
    goes through str().
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (list, tuple)):
        lines = [coerce_text(item) for item in value]
        return "\n".join(line for line in lines if line)
    return str(value)


def first_text(value: Any) -> str:
    """First non-blank string of a list, or the stripped string itself"""
    if isinstance(value, (list, tuple)):
        value = next((item for item in value if isinstance(item, str) and item.strip()), "")
    return coerce_text(value).strip()


class RecipeNormalizer:
    """Total mapping from raw generative output to the canonical record"""

    @staticmethod
    def normalize(data: Any) -> ExtractedRecipe:
        """
        Normalize a raw recipe object.

        Never raises: non-mapping input is treated as an empty object. No
        semantic validation happens here.

        Args:
            data: Parsed JSON value from the generative service

        Returns:
            ExtractedRecipe with every text field populated
        """
        if not isinstance(data, Mapping):
            logger.warning(f"Expected a recipe object, got {type(data).__name__}")
            data = {}

        fields: Dict[str, Any] = {field: coerce_text(data.get(field)) for field in TEXT_FIELDS}

        name = coerce_text(data.get("name"))
        fields["name"] = name if name.strip() else DEFAULT_RECIPE_NAME

        image_url = first_text(data.get("image_url"))
        fields["image_url"] = image_url or None

        return ExtractedRecipe(**fields)

    @staticmethod
    def to_outcome(recipe: ExtractedRecipe) -> ExtractionOutcome:
        """
        Split a normalized record into Extracted or Declined.

        Declined outcomes quote the record notes as their reason.
        """
        if recipe.is_declined:
            return Declined(sentinel=SentinelName(recipe.name), reason=recipe.notes)
        return Extracted(recipe=recipe)
