"""
Recipe extraction API schemas
"""
from pydantic import BaseModel, Field, field_validator
from typing import List

from recipe_inbox.domain.models import ExtractedRecipe, ProcessingResult


class UrlRequest(BaseModel):
    """Webpage or video link to extract from"""
    url: str = Field(..., description="http(s) URL of a recipe page or TikTok / Instagram video")

    @field_validator('url')
    @classmethod
    def validate_url(cls, v):
        v = v.strip()
        if not v.lower().startswith(('http://', 'https://')):
            raise ValueError("URL must start with http:// or https://")
        return v


class ExtractionResponse(BaseModel):
    """Extracted records, not submitted. Declined records keep their sentinel name."""
    recipes: List[ExtractedRecipe]


class ImportResponse(BaseModel):
    """Outcome of extracting and submitting to the recipe manager"""
    message: str
    results: List[ProcessingResult]
