"""
Video extractor for TikTok and Instagram links.

Extraction flow:
1. Resolve the share link to a direct media URL (RapidAPI)
2. Download the media
3. Transcribe the audio (OpenAI)
4. Send transcript and creator caption to Gemini
"""
import logging
from typing import List, Optional

from recipe_inbox.domain.enums import VideoPlatform
from recipe_inbox.domain.extraction_steps import ExtractionStep
from recipe_inbox.domain.models import ExtractedRecipe
from recipe_inbox.services.extractors.base_extractor import BaseExtractor
from recipe_inbox.services.gemini_service import GeminiService
from recipe_inbox.services.recipe_normalizer import RecipeNormalizer
from recipe_inbox.services.transcription_service import TranscriptionService
from recipe_inbox.services.video_download_service import VideoDownloadService

logger = logging.getLogger(__name__)


class VideoExtractor(BaseExtractor):
    """Extract a recipe from a short cooking video"""

    def __init__(
        self,
        gemini_service: GeminiService,
        download_service: VideoDownloadService,
        transcription_service: TranscriptionService,
        progress_callback=None,
    ):
        super().__init__(progress_callback)
        self._gemini = gemini_service
        self._downloader = download_service
        self._transcriber = transcription_service

    async def extract(self, source: str, platform: Optional[VideoPlatform] = None, **kwargs) -> List[ExtractedRecipe]:
        """
        Extract recipe from a video link.

        Args:
            source: TikTok or Instagram share URL
            platform: Platform tag from URL classification

        Returns:
            Single-element list; the record is NO_RECIPE-named when Gemini declined
        """
        try:
            self.update_progress(10, ExtractionStep.VIDEO_RESOLVING)
            video = await self._downloader.download(source, platform)
            logger.info(f"Got {video.platform.value} video URL: {video.video_url[:50]}...")

            self.update_progress(30, ExtractionStep.VIDEO_DOWNLOADING)
            media = await self._downloader.fetch_video_content(video.video_url)

            self.update_progress(50, ExtractionStep.VIDEO_TRANSCRIBING)
            transcript = await self._transcriber.transcribe(media)
            logger.info(f"Transcribed: {transcript[:100]}...")

            self.update_progress(80, ExtractionStep.VIDEO_EXTRACTING)
            raw = await self._gemini.extract_from_transcript(transcript, video.caption)

        except Exception as e:
            logger.error(f"Error extracting from video {source}: {str(e)}")
            raise

        recipe = RecipeNormalizer.normalize(raw)
        updates = {"source_url": source}
        if not recipe.source and video.author:
            updates["source"] = video.author
        recipe = recipe.model_copy(update=updates)

        self.update_progress(100, ExtractionStep.COMPLETE)
        return [recipe]
