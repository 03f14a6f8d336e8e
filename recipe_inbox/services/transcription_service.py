"""
Speech-to-text for downloaded video content (OpenAI audio transcription)
"""
import asyncio
import io
import logging
from typing import Optional

from openai import OpenAI

from recipe_inbox.core.config import get_settings
from recipe_inbox.domain.exceptions import TranscriptionError

logger = logging.getLogger(__name__)


class TranscriptionService:
    """Transcribe raw video/audio bytes to plain text"""

    DEFAULT_FILENAME = "video.mp4"

    def __init__(self, client: Optional[OpenAI] = None, model: Optional[str] = None):
        settings = get_settings()
        if client is None:
            if not settings.OPENAI_API_KEY:
                raise ValueError(
                    "OPENAI_API_KEY environment variable is required for TranscriptionService. "
                    "Please set it in your .env file."
                )
            client = OpenAI(api_key=settings.OPENAI_API_KEY)

        self.client = client
        self.model = model or settings.TRANSCRIPTION_MODEL

    async def transcribe(self, media: bytes, filename: str = DEFAULT_FILENAME) -> str:
        """
        Transcribe media bytes.

        Args:
            media: Raw video or audio bytes
            filename: Name sent with the upload; its extension tells the API the container format

        Returns:
            Transcript text

        Raises:
            TranscriptionError: If the API returns no text
        """
        logger.info(f"Transcribing {len(media) / 1024 / 1024:.2f} MB of media with {self.model}")

        try:
            transcript = await asyncio.to_thread(
                self.client.audio.transcriptions.create,
                model=self.model,
                file=(filename, io.BytesIO(media)),
                response_format="text"
            )
        except Exception as e:
            logger.error(f"Error transcribing audio: {str(e)}")
            raise

        # Plain string for response_format="text", Transcription object otherwise
        text = transcript if isinstance(transcript, str) else getattr(transcript, "text", "")
        if not text or not text.strip():
            raise TranscriptionError()

        logger.info(f"Transcription complete: {len(text)} characters")
        return text.strip()
