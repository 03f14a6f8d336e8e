"""
Gemini service for generative recipe extraction.

Sends images, PDFs, page HTML or video transcripts to Gemini with a fixed
instruction template and parses the JSON it returns. Text prompts fall back
to OpenAI chat completions when Gemini refuses due to recitation detection.

The templates ask for the flat recipe record used everywhere else:
name, ingredients, directions, prep_time, cook_time, servings, source,
source_url, notes (and image_url for webpages). Declines come back as the
sentinel names UNREADABLE and NO_RECIPE.
"""
import asyncio
import base64
import json
import logging
import re
from typing import Any, Dict, Iterator, List, Optional

import google.generativeai as genai
from openai import OpenAI

from recipe_inbox.core.config import get_settings
from recipe_inbox.domain.enums import SentinelName
from recipe_inbox.domain.exceptions import GenerativeResponseError

logger = logging.getLogger(__name__)


# ========================================
# Instruction templates
# ========================================

RECORD_FIELDS = """{{
  "name": "{name_hint}",
  "ingredients": "One ingredient per line, with quantities and units",
  "directions": "One step per line, numbered 1., 2., 3. in order",
  "prep_time": "Prep time if given, otherwise empty string",
  "cook_time": "Cook time if given, otherwise empty string",
  "servings": "Servings or yield if given, otherwise empty string",
  "source": "{source_hint}",
  "source_url": "",
  "notes": "Tips, variations or other remarks"{extra_fields}
}}"""

IMAGE_RECORD = RECORD_FIELDS.format(
    name_hint="Recipe title as printed",
    source_hint="Book, author or attribution if visible, otherwise empty string",
    extra_fields="",
)

DOCUMENT_RECORD = RECORD_FIELDS.format(
    name_hint="Recipe title",
    source_hint="Book, author or attribution if given, otherwise empty string",
    extra_fields="",
)

URL_RECORD = RECORD_FIELDS.format(
    name_hint="Recipe title",
    source_hint="Website or author name",
    extra_fields=',\n  "image_url": "Absolute URL of the main recipe photo, otherwise empty string"',
)

TRANSCRIPT_RECORD = RECORD_FIELDS.format(
    name_hint="Recipe title, inferred from context if never stated",
    source_hint="Creator name if mentioned, otherwise empty string",
    extra_fields="",
)

IMAGE_PROMPT = """Read the recipe in this image and respond with JSON only, no markdown and no commentary.

{record}

Rules:
- Copy ingredient quantities and measurements exactly
- Keep the steps in their original order
- When text is hard to read, give your best reading
- If the recipe cannot be read at all, set name to "{sentinel}" and say why in notes""".format(
    record=IMAGE_RECORD,
    sentinel=SentinelName.UNREADABLE.value,
)

MULTI_IMAGE_PREFIX = (
    "The following {count} images are pages of ONE recipe. "
    "Merge everything they contain into a single recipe object.\n\n"
)

DOCUMENT_PROMPT = """Read every recipe in this PDF and respond with JSON only, no markdown and no commentary.

Always respond with an array, even when the document holds a single recipe:

[
{record}
]

Rules:
- Include every recipe in the document, in document order
- Copy ingredient quantities and measurements exactly
- Keep the steps in their original order
- If the document cannot be read at all, return one object with name "{sentinel}" and say why in notes""".format(
    record=DOCUMENT_RECORD,
    sentinel=SentinelName.UNREADABLE.value,
)

URL_PROMPT = """Find the recipe in the webpage HTML above and respond with JSON only, no markdown and no commentary.

{record}

Rules:
- Prefer embedded structured data (JSON-LD, schema.org microdata) when present
- Copy ingredient quantities and measurements exactly
- Keep the steps in their original order
- If the page has no recipe, set name to "{sentinel}" and say why in notes""".format(
    record=URL_RECORD,
    sentinel=SentinelName.NO_RECIPE.value,
)

TRANSCRIPT_PROMPT = """Above is material from a short cooking video: the spoken audio transcript and, when available, the caption the creator wrote.

Respond with JSON only, no markdown and no commentary.

{record}

Rules:
- Use both the transcript and the caption
- Captions often list the exact quantities; prefer them over spoken approximations
- Interpret casual amounts ("a splash", "a handful") sensibly and mention estimates in notes
- Reorder steps into a logical sequence when they were spoken out of order
- If neither source contains a recipe, set name to "{sentinel}" and say why in notes""".format(
    record=TRANSCRIPT_RECORD,
    sentinel=SentinelName.NO_RECIPE.value,
)


# ========================================
# Response parsing
# ========================================

JSON_START = re.compile(r'[\[{]')


def _iter_json_spans(text: str) -> Iterator[Any]:
    """
    Yield every JSON value embedded in free text, left to right.

    Scanning restarts after the end of each decoded value, so nested
    objects are never yielded on their own.
    """
    decoder = json.JSONDecoder()
    position = 0
    while True:
        match = JSON_START.search(text, position)
        if not match:
            return
        try:
            value, end = decoder.raw_decode(text, match.start())
        except json.JSONDecodeError:
            position = match.start() + 1
            continue
        yield value
        position = end


def _load_json(text: str) -> Any:
    try:
        return json.loads(text.strip())
    except json.JSONDecodeError:
        return None


def parse_recipe_object(text: str) -> Dict[str, Any]:
    """
    Parse a single recipe object from a response.

    Pure JSON is tried first, then the first embedded object span. A list
    holding objects yields its first object.

    Raises:
        GenerativeResponseError: If no JSON object can be found
    """
    candidates = []
    direct = _load_json(text)
    if direct is not None:
        candidates.append(direct)
    candidates.extend(_iter_json_spans(text))

    for value in candidates:
        if isinstance(value, dict):
            return value
        if isinstance(value, list):
            objects = [item for item in value if isinstance(item, dict)]
            if objects:
                return objects[0]

    raise GenerativeResponseError(f"Failed to parse recipe JSON: {text[:200]}")


def parse_recipe_list(text: str) -> List[Dict[str, Any]]:
    """
    Parse zero or more recipe objects from a response.

    Accepts a bare object, an array, or JSON embedded in prose. Inside prose
    the first array wins; otherwise every bare object is collected in order.

    Raises:
        GenerativeResponseError: If the response holds no JSON at all
    """
    direct = _load_json(text)
    if isinstance(direct, list):
        return [item for item in direct if isinstance(item, dict)]
    if isinstance(direct, dict):
        return [direct]

    found_json = False
    objects: List[Dict[str, Any]] = []
    for value in _iter_json_spans(text):
        found_json = True
        if isinstance(value, dict):
            objects.append(value)
        elif isinstance(value, list) and not objects:
            items = [item for item in value if isinstance(item, dict)]
            if items:
                return items

    if not found_json:
        raise GenerativeResponseError(f"Failed to parse recipe JSON: {text[:200]}")
    return objects


# ========================================
# Service
# ========================================

class GeminiService:
    """Service for Google Gemini API interactions for recipe extraction."""

    IMAGE_MAX_TOKENS = 4096
    DOCUMENT_MAX_TOKENS = 8192
    TEXT_MAX_TOKENS = 4096

    # Image types Gemini accepts inline
    INLINE_IMAGE_TYPES = {"image/jpeg", "image/png", "image/webp", "image/heic", "image/heif"}

    def __init__(
        self,
        api_key: Optional[str] = None,
        model_name: Optional[str] = None,
        openai_client: Optional[OpenAI] = None,
    ):
        """
        Initialize Gemini service.

        Args:
            api_key: Google API key, defaults to GOOGLE_API_KEY
            model_name: Gemini model, defaults to GEMINI_MODEL
            openai_client: Client for the recitation fallback, built from
                OPENAI_API_KEY when omitted
        """
        settings = get_settings()
        api_key = api_key or settings.GOOGLE_API_KEY
        if not api_key:
            raise ValueError(
                "GOOGLE_API_KEY environment variable is required for GeminiService. "
                "Please set it in your .env file."
            )

        genai.configure(api_key=api_key)
        self._genai = genai
        self.model_name = model_name or settings.GEMINI_MODEL
        self.openai_model = settings.OPENAI_FALLBACK_MODEL

        if openai_client is None and settings.OPENAI_API_KEY:
            openai_client = OpenAI(api_key=settings.OPENAI_API_KEY)
        self._openai_client = openai_client

        logger.info(
            f"GeminiService initialized with model={self.model_name}, "
            f"fallback={self.openai_model if self._openai_client else 'disabled'}"
        )

    # ========================================
    # Public extraction methods
    # ========================================

    async def extract_from_images(
        self,
        images: List[bytes],
        mime_types: Optional[List[Optional[str]]] = None,
    ) -> Dict[str, Any]:
        """
        Extract one recipe from one or more images.

        With more than one image the prompt tells Gemini the images are pages
        of the same recipe and must be merged.

        Args:
            images: Raw image bytes, in order
            mime_types: Declared media types, parallel to images

        Returns:
            Raw recipe object as returned by Gemini
        """
        if not images:
            raise ValueError("No images provided for extraction")

        mime_types = mime_types or [None] * len(images)
        content_parts: List[Any] = []
        for image_bytes, declared_type in zip(images, mime_types):
            content_parts.append(self._inline_part(image_bytes, self._resolve_image_mime_type(image_bytes, declared_type)))

        prompt = IMAGE_PROMPT
        if len(images) > 1:
            prompt = MULTI_IMAGE_PREFIX.format(count=len(images)) + IMAGE_PROMPT
        content_parts.append(prompt)

        text = await self._generate(content_parts, max_tokens=self.IMAGE_MAX_TOKENS)
        recipe = parse_recipe_object(text)
        logger.info(f"Extracted recipe from {len(images)} image(s): {recipe.get('name', 'Unknown')}")
        return recipe

    async def extract_from_document(self, pdf_bytes: bytes) -> List[Dict[str, Any]]:
        """
        Extract every recipe in a PDF document.

        Returns:
            Raw recipe objects, possibly empty
        """
        content_parts = [
            self._inline_part(pdf_bytes, "application/pdf"),
            DOCUMENT_PROMPT,
        ]

        text = await self._generate(content_parts, max_tokens=self.DOCUMENT_MAX_TOKENS)
        recipes = parse_recipe_list(text)
        logger.info(f"Extracted {len(recipes)} recipe(s) from PDF document")
        return recipes

    async def extract_from_html(self, html: str, url: str) -> Dict[str, Any]:
        """
        Extract a recipe from (already truncated) page HTML.

        Args:
            html: Page HTML, bounded by the caller
            url: Page URL, given to the model as context
        """
        prompt = f"HTML content of {url}:\n\n{html}\n\n{URL_PROMPT}"
        text = await self._generate([prompt], max_tokens=self.TEXT_MAX_TOKENS, fallback_prompt=prompt)
        return parse_recipe_object(text)

    async def extract_from_transcript(self, transcript: str, caption: Optional[str] = None) -> Dict[str, Any]:
        """
        Extract a recipe from a video transcript and optional creator caption.

        Args:
            transcript: Speech-to-text output
            caption: Caption/description written under the video
        """
        logger.info(
            f"Extracting recipe from transcript ({len(transcript)} chars)"
            + (f" and caption ({len(caption)} chars)" if caption else "")
        )

        prompt = f"## Audio transcript (spoken in the video)\n\n{transcript}"
        if caption:
            prompt += f"\n\n## Caption (written by the creator)\n\n{caption}"
        prompt += f"\n\n{TRANSCRIPT_PROMPT}"

        text = await self._generate([prompt], max_tokens=self.TEXT_MAX_TOKENS, fallback_prompt=prompt)
        return parse_recipe_object(text)

    # ========================================
    # Model calls
    # ========================================

    def _get_generation_config(self, temperature: float = 0.2, max_tokens: int = 4096):
        """Get generation config for Gemini API calls."""
        return self._genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_tokens,
            response_mime_type="application/json"
        )

    async def _generate(
        self,
        content_parts: List[Any],
        max_tokens: int,
        fallback_prompt: Optional[str] = None,
    ) -> str:
        """
        Run one Gemini call and return its text.

        Args:
            content_parts: Prompt text and inline media parts
            max_tokens: Output token bound
            fallback_prompt: Plain-text prompt to resend to OpenAI if Gemini
                blocks on recitation. None disables the fallback.

        Raises:
            GenerativeResponseError: If the response is empty
        """
        model = self._genai.GenerativeModel(
            model_name=self.model_name,
            generation_config=self._get_generation_config(max_tokens=max_tokens),
        )

        # Run in thread pool since the SDK is synchronous
        def _call():
            response = model.generate_content(content_parts)
            return response.text

        try:
            text = await asyncio.to_thread(_call)
        except Exception as e:
            if fallback_prompt is not None and self._openai_client and self._is_recitation_error(e):
                logger.warning(f"Gemini blocked due to copyright detection, falling back to OpenAI: {str(e)}")
                return await self._generate_openai(fallback_prompt, max_tokens)
            logger.error(f"Gemini request failed: {str(e)}")
            raise

        if not text or not text.strip():
            raise GenerativeResponseError("No text response from Gemini")
        return text

    async def _generate_openai(self, prompt: str, max_tokens: int) -> str:
        """Fallback: run the same prompt through OpenAI chat completions."""
        response = await asyncio.to_thread(
            self._openai_client.chat.completions.create,
            model=self.openai_model,
            messages=[{"role": "user", "content": prompt}],
            response_format={"type": "json_object"},
            max_tokens=max_tokens,
            temperature=0.2
        )

        text = response.choices[0].message.content if response.choices else None
        if not text or not text.strip():
            raise GenerativeResponseError("No text response from OpenAI fallback")

        logger.info(f"OpenAI fallback ({self.openai_model}) returned {len(text)} chars")
        return text

    def _is_recitation_error(self, error: Exception) -> bool:
        """Check if error is due to Gemini's copyright/recitation detection."""
        error_str = str(error).lower()
        return (
            "reciting from copyrighted material" in error_str or
            "recitation" in error_str or
            ("finish_reason" in error_str and "4" in error_str)
        )

    # ========================================
    # Inline media helpers
    # ========================================

    def _inline_part(self, data: bytes, mime_type: str) -> Dict[str, str]:
        return {
            "mime_type": mime_type,
            "data": base64.b64encode(data).decode("utf-8")
        }

    def _resolve_image_mime_type(self, image_bytes: bytes, declared: Optional[str]) -> str:
        """Use the declared type when Gemini accepts it, otherwise sniff the bytes"""
        if declared:
            declared = declared.lower()
            if declared == "image/jpg":
                declared = "image/jpeg"
            if declared in self.INLINE_IMAGE_TYPES:
                return declared
        return self._detect_image_mime_type(image_bytes)

    def _detect_image_mime_type(self, image_bytes: bytes) -> str:
        """
        Detect MIME type from image magic bytes.

        Args:
            image_bytes: Raw image bytes

        Returns:
            MIME type string
        """
        if image_bytes[:3] == b"\xff\xd8\xff":
            return "image/jpeg"
        elif image_bytes[:8] == b"\x89PNG\r\n\x1a\n":
            return "image/png"
        elif image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
            return "image/webp"
        elif image_bytes[4:12] in (b"ftypheic", b"ftypheix", b"ftypmif1"):
            return "image/heic"
        else:
            # Default to JPEG
            return "image/jpeg"
