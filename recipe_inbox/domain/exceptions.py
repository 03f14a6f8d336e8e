"""
Custom exceptions for domain-specific errors
"""
from typing import Optional


class MalformedEmailError(Exception):
    """
    Raised when an inbound message cannot be parsed as MIME.
    This is the only fault that aborts a whole message.
    """

    def __init__(self, message: str = "Email could not be parsed"):
        self.message = message
        super().__init__(self.message)


class WebsiteBlockedError(Exception):
    """
    Raised when a website blocks automated extraction (403 Forbidden).
    """

    def __init__(self, url: str, message: str = "Website blocks automated extraction"):
        self.url = url
        self.message = message
        super().__init__(self.message)


class GenerativeResponseError(Exception):
    """Raised when the generative service returns nothing usable as recipe JSON"""

    def __init__(self, message: str = "Generative service returned no recipe JSON"):
        self.message = message
        super().__init__(self.message)


class UnsupportedPlatformError(Exception):
    """Raised when a video URL does not belong to a platform we can download from"""

    def __init__(self, url: str, message: Optional[str] = None):
        self.url = url
        self.message = message or f"Unsupported video platform: {url}"
        super().__init__(self.message)


class VideoDownloadError(Exception):
    """Raised when a platform download service fails or returns no media URL"""

    def __init__(self, platform: str, message: str):
        self.platform = platform
        self.message = message
        super().__init__(self.message)


class TranscriptionError(Exception):
    """Raised when speech-to-text returns no transcript"""

    def __init__(self, message: str = "No transcription text returned"):
        self.message = message
        super().__init__(self.message)


class RecipeManagerError(Exception):
    """
    Raised when the recipe manager (Paprika) rejects a request.
    Carries the HTTP status and response body for the failure report.
    """

    def __init__(self, message: str, status_code: Optional[int] = None, body: str = ""):
        self.status_code = status_code
        self.body = body
        self.message = message
        super().__init__(self.message)
