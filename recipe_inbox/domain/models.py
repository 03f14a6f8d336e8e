"""
Core domain models
"""
from dataclasses import dataclass
from typing import List, Optional, Union
from pydantic import BaseModel, Field, computed_field, model_validator

from recipe_inbox.domain.enums import ContentType, VideoPlatform, SentinelName


# ============= Ingestion Models =============

BINARY_CONTENT_TYPES = {ContentType.IMAGE, ContentType.DOCUMENT}


class ContentItem(BaseModel):
    """
    A classified unit of input awaiting extraction.

    Images and documents carry raw bytes, urls and videos carry the link text.
    """
    type: ContentType
    data: Union[bytes, str]
    mime_type: Optional[str] = None
    filename: Optional[str] = None
    platform: Optional[VideoPlatform] = None  # Only set for videos

    @model_validator(mode="after")
    def check_payload_kind(self):
        """The payload kind is fully determined by the tag"""
        expects_bytes = self.type in BINARY_CONTENT_TYPES
        if expects_bytes and not isinstance(self.data, bytes):
            raise ValueError(f"{self.type.value} items must carry bytes")
        if not expects_bytes and not isinstance(self.data, str):
            raise ValueError(f"{self.type.value} items must carry text")
        return self


class ParsedEmailContent(BaseModel):
    """Content items found in one message, bucketed by type in first-seen order"""
    images: List[ContentItem] = Field(default_factory=list)
    documents: List[ContentItem] = Field(default_factory=list)
    urls: List[ContentItem] = Field(default_factory=list)
    videos: List[ContentItem] = Field(default_factory=list)

    @property
    def total_items(self) -> int:
        return len(self.images) + len(self.documents) + len(self.urls) + len(self.videos)


# ============= Recipe Models =============

class ExtractedRecipe(BaseModel):
    """Canonical recipe record handed to the recipe manager"""
    name: str = ""
    ingredients: str = ""  # One ingredient per line
    directions: str = ""   # One numbered step per line
    prep_time: str = ""
    cook_time: str = ""
    servings: str = ""
    source: str = ""
    source_url: str = ""
    notes: str = ""
    image_url: Optional[str] = None

    @property
    def is_declined(self) -> bool:
        """True when the name is one of the reserved decline sentinels"""
        return self.name in {sentinel.value for sentinel in SentinelName}


@dataclass(frozen=True)
class Extracted:
    """A strategy produced a usable recipe"""
    recipe: ExtractedRecipe


@dataclass(frozen=True)
class Declined:
    """A strategy explicitly declined; reason comes from the record notes"""
    sentinel: SentinelName
    reason: str


ExtractionOutcome = Union[Extracted, Declined]


# ============= Video Models =============

@dataclass
class VideoDownloadResult:
    """Normalized response of a platform download service"""
    platform: VideoPlatform
    video_url: str
    title: Optional[str] = None
    caption: Optional[str] = None  # Full caption/description written by the creator
    author: Optional[str] = None
    thumbnail: Optional[str] = None


# ============= Processing Results =============

class ProcessingResult(BaseModel):
    """Outcome of one submitted (or declined, or failed) recipe"""
    success: bool
    source: str
    recipe_name: Optional[str] = None
    error: Optional[str] = None


class ProcessingSummary(BaseModel):
    """Tally of every item processed for one inbound message"""
    results: List[ProcessingResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> List[ProcessingResult]:
        return [r for r in self.results if r.success]

    @property
    def failed(self) -> List[ProcessingResult]:
        return [r for r in self.results if not r.success]

    @computed_field
    @property
    def succeeded_count(self) -> int:
        return len(self.succeeded)

    @computed_field
    @property
    def failed_count(self) -> int:
        return len(self.failed)
