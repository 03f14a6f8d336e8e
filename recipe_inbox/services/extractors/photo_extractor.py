"""
Photo extractor using Gemini vision.

All images of one message are treated as pages of a single recipe and are
sent in one request, so this extractor always yields exactly one record.
"""
import logging
from typing import List, Union

from recipe_inbox.domain.extraction_steps import ExtractionStep
from recipe_inbox.domain.models import ContentItem, ExtractedRecipe
from recipe_inbox.services.extractors.base_extractor import BaseExtractor
from recipe_inbox.services.gemini_service import GeminiService
from recipe_inbox.services.recipe_normalizer import RecipeNormalizer

logger = logging.getLogger(__name__)


class PhotoExtractor(BaseExtractor):
    """Extract one recipe from one or more recipe photos"""

    def __init__(self, gemini_service: GeminiService, progress_callback=None):
        super().__init__(progress_callback)
        self._gemini = gemini_service

    async def extract(self, source: Union[ContentItem, List[ContentItem]], **kwargs) -> List[ExtractedRecipe]:
        """
        Extract a recipe from photo(s).

        Args:
            source: Image item or list of image items, in page order

        Returns:
            Single-element list; the record is UNREADABLE-named when Gemini declined
        """
        items = [source] if isinstance(source, ContentItem) else list(source)

        if len(items) == 0:
            raise ValueError("At least one image is required")

        if len(items) == 1:
            self.update_progress(20, ExtractionStep.PHOTO_SINGLE)
        else:
            self.update_progress(20, ExtractionStep.PHOTO_MULTIPLE)
            logger.info(f"Merging {len(items)} images into a single recipe")

        try:
            raw = await self._gemini.extract_from_images(
                [item.data for item in items],
                [item.mime_type for item in items],
            )
        except Exception as e:
            logger.error(f"Error extracting from photo(s): {str(e)}")
            raise

        self.update_progress(100, ExtractionStep.COMPLETE)
        return [RecipeNormalizer.normalize(raw)]
