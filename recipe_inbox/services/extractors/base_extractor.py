"""
Base extractor class
"""
from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional, Union
import logging

from recipe_inbox.domain.extraction_steps import ExtractionStep
from recipe_inbox.domain.models import ExtractedRecipe

logger = logging.getLogger(__name__)


class BaseExtractor(ABC):
    """Base class for all recipe extractors"""

    def __init__(self, progress_callback: Optional[Callable[[int, str], None]] = None):
        """
        Initialize extractor

        Args:
            progress_callback: Optional callback for progress updates (percentage, step code)
        """
        self.progress_callback = progress_callback

    def update_progress(self, percentage: int, step: Union[ExtractionStep, str]):
        """Update extraction progress"""
        step_code = step.value if isinstance(step, ExtractionStep) else step
        if self.progress_callback:
            self.progress_callback(percentage, step_code)
        logger.info(f"Extraction progress: {percentage}% - {step_code}")

    @abstractmethod
    async def extract(self, source: Any, **kwargs) -> List[ExtractedRecipe]:
        """
        Extract recipe records from a source

        Args:
            source: URL or content item(s), depending on the extractor
            **kwargs: Additional extractor-specific parameters

        Returns:
            Normalized records. Sentinel-named records are included; the
            caller decides what a decline means.
        """
        pass
