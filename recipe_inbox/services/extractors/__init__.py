"""
Recipe extraction services for different content types.

Extractors:
- BaseExtractor: Abstract base class for all extractors
- LinkExtractor: Recipe webpages (JSON-LD first, Gemini fallback)
- PhotoExtractor: One recipe from one or more images
- DocumentExtractor: Every recipe in a PDF
- VideoExtractor: TikTok / Instagram download, transcription and extraction
"""
from recipe_inbox.services.extractors.base_extractor import BaseExtractor
from recipe_inbox.services.extractors.link_extractor import LinkExtractor
from recipe_inbox.services.extractors.photo_extractor import PhotoExtractor
from recipe_inbox.services.extractors.document_extractor import DocumentExtractor
from recipe_inbox.services.extractors.video_extractor import VideoExtractor

__all__ = [
    "BaseExtractor",
    "LinkExtractor",
    "PhotoExtractor",
    "DocumentExtractor",
    "VideoExtractor",
]
