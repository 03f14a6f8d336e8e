"""
Video download service for TikTok and Instagram.

Resolves a share link to a direct media URL plus creator metadata through
RapidAPI download services, then fetches the media bytes.
"""
import logging
from typing import Any, Dict, Optional

import httpx

from recipe_inbox.core.config import get_settings
from recipe_inbox.domain.enums import VideoPlatform
from recipe_inbox.domain.exceptions import UnsupportedPlatformError, VideoDownloadError
from recipe_inbox.domain.models import VideoDownloadResult
from recipe_inbox.services.url_classifier import URLClassifier

logger = logging.getLogger(__name__)

TIKTOK_INFO_PATH = "/tiktok/info"
INSTAGRAM_REELS_PATH = "/download-reels"

INSTAGRAM_TITLE_LENGTH = 100

PLATFORM_LABELS = {
    VideoPlatform.TIKTOK: "TikTok",
    VideoPlatform.INSTAGRAM: "Instagram",
}

MEDIA_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36',
}


class VideoDownloadService:
    """RapidAPI-backed video resolution and media fetch"""

    def __init__(
        self,
        api_key: Optional[str] = None,
        tiktok_host: Optional[str] = None,
        instagram_host: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        settings = get_settings()
        self.api_key = api_key or settings.RAPIDAPI_KEY
        if not self.api_key:
            raise ValueError(
                "RAPIDAPI_KEY environment variable is required for VideoDownloadService. "
                "Please set it in your .env file."
            )
        self.tiktok_host = tiktok_host or settings.TIKTOK_API_HOST
        self.instagram_host = instagram_host or settings.INSTAGRAM_API_HOST
        self.timeout = timeout or settings.VIDEO_FETCH_TIMEOUT

    async def download(self, url: str, platform: Optional[VideoPlatform] = None) -> VideoDownloadResult:
        """
        Resolve a video share link.

        Args:
            url: TikTok or Instagram link
            platform: Platform tag from classification; detected when omitted

        Returns:
            VideoDownloadResult with the direct media URL

        Raises:
            UnsupportedPlatformError: If the URL is not a supported platform
            VideoDownloadError: If the download service fails or returns no media URL
        """
        platform = platform or URLClassifier.detect_video_platform(url)

        if platform == VideoPlatform.TIKTOK:
            return await self._download_tiktok(url)
        if platform == VideoPlatform.INSTAGRAM:
            return await self._download_instagram(url)

        raise UnsupportedPlatformError(url)

    async def fetch_video_content(self, video_url: str) -> bytes:
        """
        Fetch the media bytes behind a direct video URL.

        Raises:
            VideoDownloadError: On a non-success response
        """
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.get(video_url, headers=MEDIA_HEADERS)

        if response.status_code != 200:
            raise VideoDownloadError("media", f"Failed to fetch video: {response.status_code}")

        logger.info(f"Fetched video content: {len(response.content) / 1024 / 1024:.2f} MB")
        return response.content

    # ========================================
    # Platform calls
    # ========================================

    async def _download_tiktok(self, url: str) -> VideoDownloadResult:
        payload = await self._call_api(VideoPlatform.TIKTOK, self.tiktok_host, TIKTOK_INFO_PATH, url)
        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}

        video_url = data.get("play") or data.get("wmplay")
        if not video_url:
            raise VideoDownloadError(VideoPlatform.TIKTOK.value, "No video URL found in TikTok response")

        author = data.get("author") or {}
        return VideoDownloadResult(
            platform=VideoPlatform.TIKTOK,
            video_url=video_url,
            title=data.get("title"),
            # Description holds the full caption, title is the fallback
            caption=data.get("desc") or data.get("title"),
            author=author.get("nickname") if isinstance(author, dict) else None,
            thumbnail=data.get("cover"),
        )

    async def _download_instagram(self, url: str) -> VideoDownloadResult:
        payload = await self._call_api(VideoPlatform.INSTAGRAM, self.instagram_host, INSTAGRAM_REELS_PATH, url)
        data = payload.get("data")
        if not isinstance(data, dict):
            data = {}

        video_url = data.get("video_url")
        if not video_url:
            raise VideoDownloadError(VideoPlatform.INSTAGRAM.value, "No video URL found in Instagram response")

        caption = data.get("caption")
        owner = data.get("owner") or {}
        return VideoDownloadResult(
            platform=VideoPlatform.INSTAGRAM,
            video_url=video_url,
            title=caption[:INSTAGRAM_TITLE_LENGTH] if caption else None,
            caption=caption,
            author=owner.get("username") if isinstance(owner, dict) else None,
            thumbnail=data.get("thumbnail_url"),
        )

    async def _call_api(self, platform: VideoPlatform, host: str, path: str, url: str) -> Dict[str, Any]:
        headers = {
            'X-RapidAPI-Key': self.api_key,
            'X-RapidAPI-Host': host,
        }

        logger.info(f"Resolving {platform.value} video: {url}")
        async with httpx.AsyncClient(timeout=self.timeout) as client:
            response = await client.get(f"https://{host}{path}", params={"url": url}, headers=headers)

        if response.status_code != 200:
            raise VideoDownloadError(
                platform.value,
                f"{PLATFORM_LABELS[platform]} API error: {response.status_code} - {response.text}"
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise VideoDownloadError(platform.value, f"Invalid JSON from {platform.value} API") from e

        if not isinstance(payload, dict):
            raise VideoDownloadError(platform.value, f"Unexpected {platform.value} API response")
        return payload
