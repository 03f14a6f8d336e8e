"""
Enumerations for domain models
"""
from enum import Enum


class ContentType(str, Enum):
    """Kinds of content an inbound message can carry"""
    IMAGE = "image"
    DOCUMENT = "document"
    URL = "url"
    VIDEO = "video"


class VideoPlatform(str, Enum):
    """Short-video platforms we can download and transcribe"""
    TIKTOK = "tiktok"
    INSTAGRAM = "instagram"


class UrlCategory(str, Enum):
    """Routing decision for a URL found in a message body"""
    VIDEO = "video"        # Short-video link, goes through download + transcription
    RECIPE = "recipe"      # Candidate recipe page, goes through the webpage chain
    REJECTED = "rejected"  # Social, legal, asset or account links


class SentinelName(str, Enum):
    """
    Reserved recipe names the generative service uses to decline.

    UNREADABLE is used for images and documents, NO_RECIPE for pages and videos.
    """
    UNREADABLE = "UNREADABLE"
    NO_RECIPE = "NO_RECIPE"
