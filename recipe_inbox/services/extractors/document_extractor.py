"""
Document extractor for PDF attachments
"""
import logging
from typing import List

from recipe_inbox.domain.extraction_steps import ExtractionStep
from recipe_inbox.domain.models import ContentItem, ExtractedRecipe
from recipe_inbox.services.extractors.base_extractor import BaseExtractor
from recipe_inbox.services.gemini_service import GeminiService
from recipe_inbox.services.recipe_normalizer import RecipeNormalizer

logger = logging.getLogger(__name__)


class DocumentExtractor(BaseExtractor):
    """Extract every recipe from a PDF document"""

    def __init__(self, gemini_service: GeminiService, progress_callback=None):
        super().__init__(progress_callback)
        self._gemini = gemini_service

    async def extract(self, source: ContentItem, **kwargs) -> List[ExtractedRecipe]:
        """
        Extract recipes from a PDF.

        Args:
            source: Document item carrying the PDF bytes

        Returns:
            One normalized record per recipe found, possibly empty
        """
        self.update_progress(20, ExtractionStep.DOCUMENT_EXTRACTING)
        logger.info(f"Extracting recipes from document: {source.filename}")

        raw_recipes = await self._gemini.extract_from_document(source.data)
        recipes = [RecipeNormalizer.normalize(raw) for raw in raw_recipes]

        self.update_progress(100, ExtractionStep.COMPLETE)
        return recipes
