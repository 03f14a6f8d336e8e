"""
Extraction orchestrator service
Coordinates parsing, per-item extraction and submission to the recipe manager
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional, Union

from recipe_inbox.core.config import Settings, get_settings
from recipe_inbox.domain.enums import ContentType
from recipe_inbox.domain.exceptions import UnsupportedPlatformError
from recipe_inbox.domain.models import (
    ContentItem,
    Declined,
    ExtractedRecipe,
    ParsedEmailContent,
    ProcessingResult,
    ProcessingSummary,
)
from recipe_inbox.services.email_parser import EmailContentExtractor
from recipe_inbox.services.extractors import (
    DocumentExtractor,
    LinkExtractor,
    PhotoExtractor,
    VideoExtractor,
)
from recipe_inbox.services.gemini_service import GeminiService
from recipe_inbox.services.paprika_service import PaprikaService
from recipe_inbox.services.recipe_normalizer import RecipeNormalizer
from recipe_inbox.services.transcription_service import TranscriptionService
from recipe_inbox.services.url_classifier import URLClassifier
from recipe_inbox.services.video_download_service import VideoDownloadService

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_DESCRIPTION = "PDF"


@dataclass
class WorkItem:
    """One isolated unit of work: a description for reports and its extraction call"""
    description: str
    extract: Callable[[], Awaitable[List[ExtractedRecipe]]]


def decline_message(description: str, reason: str) -> str:
    return f"Could not extract recipe from {description}: {reason}"


class ExtractionService:
    """Orchestrates recipe extraction from every content item in a message"""

    def __init__(
        self,
        recipe_manager: PaprikaService,
        link_extractor: LinkExtractor,
        photo_extractor: PhotoExtractor,
        document_extractor: DocumentExtractor,
        video_extractor: Optional[VideoExtractor] = None,
        email_parser: Optional[EmailContentExtractor] = None,
        process_concurrently: bool = False,
    ):
        """
        Args:
            recipe_manager: Sink receiving every extracted recipe
            link_extractor: Webpage chain
            photo_extractor: Image chain
            document_extractor: PDF chain
            video_extractor: Video chain, None when video services are not configured
            email_parser: Message splitter, created when omitted
            process_concurrently: Run item tasks together instead of one after another
        """
        self.recipe_manager = recipe_manager
        self.link_extractor = link_extractor
        self.photo_extractor = photo_extractor
        self.document_extractor = document_extractor
        self.video_extractor = video_extractor
        self.email_parser = email_parser or EmailContentExtractor()
        self.process_concurrently = process_concurrently

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ExtractionService":
        """
        Build the service and its collaborators from configuration.

        Raises:
            ValueError: If Gemini or Paprika credentials are missing
        """
        settings = settings or get_settings()
        gemini = GeminiService()

        video_extractor = None
        if settings.RAPIDAPI_KEY and settings.OPENAI_API_KEY:
            video_extractor = VideoExtractor(
                gemini,
                VideoDownloadService(),
                TranscriptionService(),
            )
        else:
            logger.warning("RAPIDAPI_KEY or OPENAI_API_KEY not set, video links will not be processed")

        return cls(
            recipe_manager=PaprikaService(),
            link_extractor=LinkExtractor(gemini),
            photo_extractor=PhotoExtractor(gemini),
            document_extractor=DocumentExtractor(gemini),
            video_extractor=video_extractor,
            process_concurrently=settings.PROCESS_ITEMS_CONCURRENTLY,
        )

    # ========================================
    # Full pipeline
    # ========================================

    async def process_email(self, raw_email: Union[bytes, str]) -> ProcessingSummary:
        """
        Extract and submit every recipe found in a raw email.

        Args:
            raw_email: Raw RFC 822 message

        Returns:
            ProcessingSummary with one result per submitted, declined or failed recipe

        Raises:
            MalformedEmailError: If the message cannot be parsed
        """
        content = self.email_parser.parse(raw_email)

        if content.total_items == 0:
            logger.info("No processable content found in email")
            return ProcessingSummary()

        work_items = self._plan(content)

        if self.process_concurrently:
            groups = await asyncio.gather(*(self._process_item(item) for item in work_items))
        else:
            groups = []
            for item in work_items:
                groups.append(await self._process_item(item))

        summary = ProcessingSummary(results=[result for group in groups for result in group])
        self._log_summary(summary)
        return summary

    def _plan(self, content: ParsedEmailContent) -> List[WorkItem]:
        """Order: all images as one unit, then each document, url and video"""
        work_items: List[WorkItem] = []

        if content.images:
            images = content.images
            logger.info(f"Processing {len(images)} image(s) as a single recipe")
            work_items.append(WorkItem(
                description=f"{len(images)} image(s)",
                extract=lambda: self.photo_extractor.extract(images),
            ))

        for document in content.documents:
            work_items.append(WorkItem(
                description=document.filename or DEFAULT_DOCUMENT_DESCRIPTION,
                extract=lambda document=document: self.document_extractor.extract(document),
            ))

        for link in content.urls:
            work_items.append(WorkItem(
                description=link.data,
                extract=lambda link=link: self.link_extractor.extract(link.data),
            ))

        for video in content.videos:
            platform = video.platform.value if video.platform else "unknown"
            work_items.append(WorkItem(
                description=f"{platform} video",
                extract=lambda video=video: self._extract_video_item(video),
            ))

        return work_items

    async def _process_item(self, item: WorkItem) -> List[ProcessingResult]:
        """
        Run one item's chain and submit its records.

        Never raises: every failure becomes a result carrying the error message.
        A submission failure stops the remaining records of the same item.
        """
        results: List[ProcessingResult] = []
        logger.info(f"Processing {item.description}")

        try:
            recipes = await item.extract()
            if not recipes:
                results.append(ProcessingResult(
                    success=False,
                    source=item.description,
                    error=decline_message(item.description, "no recipes found"),
                ))
            for recipe in recipes:
                results.append(await self.submit(recipe, item.description))

        except Exception as e:
            logger.error(f"Error processing {item.description}: {str(e)}")
            results.append(ProcessingResult(success=False, source=item.description, error=str(e)))

        return results

    async def _extract_video_item(self, item: ContentItem) -> List[ExtractedRecipe]:
        if self.video_extractor is None:
            raise RuntimeError("Video extraction is not configured")
        return await self.video_extractor.extract(item.data, platform=item.platform)

    def _log_summary(self, summary: ProcessingSummary) -> None:
        logger.info(
            f"Processing complete: {summary.succeeded_count} succeeded, {summary.failed_count} failed"
        )
        if summary.succeeded:
            logger.info(f"Added recipes: {', '.join(r.recipe_name or '' for r in summary.succeeded)}")
        if summary.failed:
            logger.info(f"Failed: {'; '.join(r.error or '' for r in summary.failed)}")

    # ========================================
    # Submission
    # ========================================

    async def submit(self, recipe: ExtractedRecipe, description: str) -> ProcessingResult:
        """
        Submit one record unless it is a decline.

        Raises:
            RecipeManagerError: If the recipe manager rejects the record
        """
        logger.info(f"Extracted recipe: {recipe.name}")
        outcome = RecipeNormalizer.to_outcome(recipe)

        if isinstance(outcome, Declined):
            logger.info(f"Declined ({outcome.sentinel.value}) for {description}: {outcome.reason}")
            return ProcessingResult(
                success=False,
                source=description,
                error=decline_message(description, outcome.reason),
            )

        recipe_name = await self.recipe_manager.create_recipe(outcome.recipe)
        logger.info(f"Created recipe in Paprika: {recipe_name}")
        return ProcessingResult(success=True, source=description, recipe_name=recipe_name)

    # ========================================
    # Single-source extraction (HTTP surface)
    # ========================================

    async def extract_images(self, images: List[ContentItem]) -> List[ExtractedRecipe]:
        return await self.photo_extractor.extract(images)

    async def extract_document(self, document: ContentItem) -> List[ExtractedRecipe]:
        return await self.document_extractor.extract(document)

    async def extract_url(self, url: str) -> List[ExtractedRecipe]:
        return await self.link_extractor.extract(url)

    async def extract_video(self, url: str) -> List[ExtractedRecipe]:
        """
        Raises:
            UnsupportedPlatformError: If the URL is not a TikTok or Instagram video
        """
        platform = URLClassifier.detect_video_platform(url)
        if platform is None:
            raise UnsupportedPlatformError(url)
        return await self._extract_video_item(ContentItem(type=ContentType.VIDEO, data=url, platform=platform))
