"""
Link extractor for recipe webpages.

Extraction chain:
1. Fetch the page with browser-like headers
2. Use schema.org JSON-LD when it has both ingredients and directions
3. Otherwise send bounded HTML to Gemini
4. Backfill a missing image from og:image / twitter:image
"""
import logging
from typing import List, Optional
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from recipe_inbox.core.config import get_settings
from recipe_inbox.domain.exceptions import WebsiteBlockedError
from recipe_inbox.domain.extraction_steps import ExtractionStep
from recipe_inbox.domain.models import ExtractedRecipe
from recipe_inbox.services.extractors.base_extractor import BaseExtractor
from recipe_inbox.services.gemini_service import GeminiService
from recipe_inbox.services.recipe_normalizer import RecipeNormalizer
from recipe_inbox.services.structured_data_extractor import StructuredDataExtractor

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n<!-- content truncated -->"

BROWSER_HEADERS = {
    'User-Agent': 'Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36',
    'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,image/apng,*/*;q=0.8',
    'Accept-Language': 'en-US,en;q=0.9',
    'Accept-Encoding': 'gzip, deflate',
    'DNT': '1',
    'Upgrade-Insecure-Requests': '1',
    'Sec-Fetch-Dest': 'document',
    'Sec-Fetch-Mode': 'navigate',
    'Sec-Fetch-Site': 'none',
    'Sec-Fetch-User': '?1',
}

# Meta tags checked for a page image, in priority order
IMAGE_META_TAGS = (
    ('property', 'og:image'),
    ('name', 'twitter:image'),
)


def truncate_html(html: str, limit: int) -> str:
    """Cut HTML to limit characters, appending the truncation marker once"""
    if len(html) <= limit:
        return html
    return html[:limit].replace(TRUNCATION_MARKER, "") + TRUNCATION_MARKER


def find_meta_image(html: str, base_url: str) -> Optional[str]:
    """
    Find the page image advertised in Open Graph or Twitter card markup.

    Args:
        html: Page HTML
        base_url: Page URL for resolving relative image URLs

    Returns:
        Absolute image URL or None
    """
    soup = BeautifulSoup(html, 'html.parser')
    for attribute, value in IMAGE_META_TAGS:
        tag = soup.find('meta', attrs={attribute: value})
        content = tag.get('content') if tag else None
        if content and content.strip():
            return urljoin(base_url, content.strip())
    return None


class LinkExtractor(BaseExtractor):
    """Extract a recipe from a webpage URL"""

    def __init__(
        self,
        gemini_service: GeminiService,
        structured_data_extractor: Optional[StructuredDataExtractor] = None,
        html_char_limit: Optional[int] = None,
        timeout: Optional[float] = None,
        progress_callback=None,
    ):
        """
        Initialize LinkExtractor.

        Args:
            gemini_service: Generative fallback for pages without complete JSON-LD
            structured_data_extractor: JSON-LD extractor, created when omitted
            html_char_limit: Max HTML characters sent to Gemini (HTML_CHAR_LIMIT)
            timeout: Page fetch timeout in seconds (URL_FETCH_TIMEOUT)
            progress_callback: Optional callback for progress updates
        """
        super().__init__(progress_callback)
        settings = get_settings()
        self._gemini = gemini_service
        self._structured = structured_data_extractor or StructuredDataExtractor()
        self.html_char_limit = html_char_limit or settings.HTML_CHAR_LIMIT
        self.timeout = timeout or settings.URL_FETCH_TIMEOUT

    async def extract(self, source: str, **kwargs) -> List[ExtractedRecipe]:
        """
        Extract the recipe on a webpage.

        Args:
            source: Webpage URL

        Returns:
            Single-element list; the record is NO_RECIPE-named when Gemini declined

        Raises:
            WebsiteBlockedError: If the site answers 403
            httpx.HTTPError: On other fetch failures
        """
        logger.info(f"LinkExtractor processing URL: {source}")

        self.update_progress(10, ExtractionStep.LINK_FETCHING)
        html = await self._fetch_html(source)

        self.update_progress(30, ExtractionStep.LINK_STRUCTURED_DATA)
        recipe = self._structured.extract(html, source)

        if StructuredDataExtractor.is_complete(recipe):
            logger.info(f"Using JSON-LD recipe for {source}")
        else:
            if recipe:
                logger.info("JSON-LD recipe is incomplete, using Gemini extraction")
            else:
                logger.info("No recipe in JSON-LD, using Gemini extraction")

            self.update_progress(50, ExtractionStep.LINK_GENERATIVE)
            raw = await self._gemini.extract_from_html(truncate_html(html, self.html_char_limit), source)
            recipe = RecipeNormalizer.normalize(raw).model_copy(update={"source_url": source})

        if recipe.image_url is None and not recipe.is_declined:
            self.update_progress(80, ExtractionStep.LINK_FINDING_IMAGE)
            image_url = find_meta_image(html, source)
            if image_url:
                recipe = recipe.model_copy(update={"image_url": image_url})

        self.update_progress(100, ExtractionStep.COMPLETE)
        return [recipe]

    async def _fetch_html(self, source: str) -> str:
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(source, headers=BROWSER_HEADERS, follow_redirects=True)

                # Check for 403 Forbidden - website blocks scraping
                if response.status_code == 403:
                    raise WebsiteBlockedError(
                        url=source,
                        message="This website blocks automated recipe extraction"
                    )

                response.raise_for_status()
                return response.text

        except Exception as e:
            logger.error(f"Error fetching URL {source}: {str(e)}")
            raise
