"""
Extraction step codes for progress tracking.
These are typed codes reported through BaseExtractor.update_progress.
"""
from enum import Enum


class ExtractionStep(str, Enum):
    """Typed extraction step codes."""

    # General steps
    COMPLETE = "complete"

    # Link extraction
    LINK_FETCHING = "link_fetching"
    LINK_STRUCTURED_DATA = "link_structured_data"
    LINK_GENERATIVE = "link_generative"
    LINK_FINDING_IMAGE = "link_finding_image"

    # Photo extraction
    PHOTO_SINGLE = "photo_single"
    PHOTO_MULTIPLE = "photo_multiple"

    # Document extraction
    DOCUMENT_EXTRACTING = "document_extracting"

    # Video extraction
    VIDEO_RESOLVING = "video_resolving"
    VIDEO_DOWNLOADING = "video_downloading"
    VIDEO_TRANSCRIBING = "video_transcribing"
    VIDEO_EXTRACTING = "video_extracting"
