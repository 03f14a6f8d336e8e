"""Pytest configuration for the recipe inbox test suite."""

from __future__ import annotations

import os
from typing import Any, Dict, List, Optional

import pytest


def _ensure_test_env() -> None:
    """Seed credentials so services can be constructed without a .env file."""
    os.environ.setdefault("GOOGLE_API_KEY", "test-google-key")
    os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
    os.environ.setdefault("PAPRIKA_EMAIL", "cook@example.com")
    os.environ.setdefault("PAPRIKA_PASSWORD", "paprika-secret")
    os.environ.setdefault("RAPIDAPI_KEY", "test-rapidapi-key")


_ensure_test_env()

from recipe_inbox.domain.enums import VideoPlatform  # noqa: E402
from recipe_inbox.domain.exceptions import RecipeManagerError  # noqa: E402
from recipe_inbox.domain.models import ExtractedRecipe, VideoDownloadResult  # noqa: E402


class FakeGemini:
    """In-memory stand-in for GeminiService that records every call."""

    def __init__(
        self,
        image_response: Optional[Dict[str, Any]] = None,
        document_response: Optional[List[Dict[str, Any]]] = None,
        html_response: Optional[Dict[str, Any]] = None,
        transcript_response: Optional[Dict[str, Any]] = None,
        error: Optional[Exception] = None,
    ) -> None:
        self.image_response = image_response or {}
        self.document_response = document_response if document_response is not None else []
        self.html_response = html_response or {}
        self.transcript_response = transcript_response or {}
        self.error = error
        self.image_calls: List[Any] = []
        self.document_calls: List[bytes] = []
        self.html_calls: List[Any] = []
        self.transcript_calls: List[Any] = []

    async def extract_from_images(self, images, mime_types=None):
        self.image_calls.append((list(images), list(mime_types or [])))
        if self.error:
            raise self.error
        return dict(self.image_response)

    async def extract_from_document(self, pdf_bytes):
        self.document_calls.append(pdf_bytes)
        if self.error:
            raise self.error
        return [dict(item) for item in self.document_response]

    async def extract_from_html(self, html, url):
        self.html_calls.append((html, url))
        if self.error:
            raise self.error
        return dict(self.html_response)

    async def extract_from_transcript(self, transcript, caption=None):
        self.transcript_calls.append((transcript, caption))
        if self.error:
            raise self.error
        return dict(self.transcript_response)


class FakeRecipeManager:
    """Recipe sink that keeps created recipes in memory."""

    def __init__(self, fail_on: Optional[List[str]] = None) -> None:
        self.fail_on = set(fail_on or [])
        self.created: List[ExtractedRecipe] = []

    async def create_recipe(self, recipe: ExtractedRecipe) -> str:
        if recipe.name in self.fail_on:
            raise RecipeManagerError(f"Failed to create recipe: 500 - rejected {recipe.name}", status_code=500)
        self.created.append(recipe)
        return recipe.name


class FakeDownloader:
    """Video download service returning a fixed result."""

    def __init__(self, result: Optional[VideoDownloadResult] = None, error: Optional[Exception] = None) -> None:
        self.result = result or VideoDownloadResult(
            platform=VideoPlatform.TIKTOK,
            video_url="https://cdn.example.com/video.mp4",
            title="Crispy tofu",
            caption="Crispy tofu\n200g tofu\n1 tbsp cornstarch",
            author="tofu_chef",
        )
        self.error = error
        self.download_calls: List[Any] = []
        self.fetch_calls: List[str] = []

    async def download(self, url, platform=None):
        self.download_calls.append((url, platform))
        if self.error:
            raise self.error
        return self.result

    async def fetch_video_content(self, video_url):
        self.fetch_calls.append(video_url)
        return b"fake-video-bytes"


class FakeTranscriber:
    """Transcription service returning a fixed transcript."""

    def __init__(self, transcript: str = "Press the tofu, toss it in cornstarch and fry.") -> None:
        self.transcript = transcript
        self.calls: List[bytes] = []

    async def transcribe(self, media, filename="video.mp4"):
        self.calls.append(media)
        return self.transcript


@pytest.fixture
def make_gemini():
    return FakeGemini


@pytest.fixture
def recipe_manager() -> FakeRecipeManager:
    return FakeRecipeManager()


@pytest.fixture
def make_recipe_manager():
    return FakeRecipeManager


@pytest.fixture
def make_downloader():
    return FakeDownloader


@pytest.fixture
def transcriber() -> FakeTranscriber:
    return FakeTranscriber()
