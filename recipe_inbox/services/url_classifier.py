"""
URL Classifier
Decides what to do with a link found in a message body: send it to the
video chain (TikTok, Instagram), treat it as a candidate recipe page, or drop it.

Video platform detection always runs first, so a TikTok link with "recipe"
in its path is a video, never a webpage.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
from urllib.parse import urlparse

from recipe_inbox.domain.enums import UrlCategory, VideoPlatform


@dataclass(frozen=True)
class UrlClassification:
    """Result of classifying a URL"""
    category: UrlCategory
    platform: Optional[VideoPlatform] = None  # Only set for UrlCategory.VIDEO


# Substrings that identify a short-video link, per platform.
# Instagram only counts when the path points at a reel, post or IGTV item.
VIDEO_SIGNATURES = {
    VideoPlatform.TIKTOK: (
        'tiktok.com',  # Also matches vm.tiktok.com and vt.tiktok.com short links
    ),
    VideoPlatform.INSTAGRAM: (
        'instagram.com/reel/',
        'instagram.com/p/',
        'instagram.com/tv/',
    ),
}

# Links that are never recipe pages
SKIP_PATTERNS: Tuple[str, ...] = (
    'unsubscribe',
    'mailto:',
    'javascript:',
    # Social networks
    'facebook.com',
    'twitter.com',
    'instagram.com',
    'pinterest.com',
    'youtube.com',
    'tiktok.com',
    'linkedin.com',
    # Stores and search
    'apple.com',
    'google.com/search',
    'amazon.com',
    # Assets
    '.css',
    '.js',
    '.png',
    '.jpg',
    '.gif',
    # Legal and account pages
    'privacy',
    'terms',
    'login',
    'signup',
    'cart',
    'checkout',
)

RECIPE_DOMAINS: Tuple[str, ...] = (
    'allrecipes.com',
    'foodnetwork.com',
    'epicurious.com',
    'bonappetit.com',
    'seriouseats.com',
    'simplyrecipes.com',
    'budgetbytes.com',
    'delish.com',
    'tasty.co',
    'food52.com',
    'cookinglight.com',
    'myrecipes.com',
    'tasteofhome.com',
    'kingarthurbaking.com',
    'smittenkitchen.com',
    'minimalistbaker.com',
    'thekitchn.com',
    'recipetineats.com',
    'halfbakedharvest.com',
    'pinchofyum.com',
    'damndelicious.net',
    'therecipecritic.com',
    'gimmesomeoven.com',
    'cafedelites.com',
    'hostthetoast.com',
    'skinnytaste.com',
    'wellplated.com',
    'cookieandkate.com',
    'loveandlemons.com',
)

RECIPE_KEYWORDS: Tuple[str, ...] = (
    'recipe',
    'cook',
    'bake',
    'food',
    'dish',
    'meal',
    'ingredient',
)


class URLClassifier:
    """
    Stateless URL routing.

    Evaluation order for non-video links:
    1. Reject on any skip pattern
    2. Accept known recipe domains
    3. Accept recipe keywords anywhere in the URL
    4. Accept anything that is not a bare homepage (at least one path segment)

    Step 4 accepts most deep links, including some non-recipe pages.
    """

    @classmethod
    def detect_video_platform(cls, url: str) -> Optional[VideoPlatform]:
        """
        Get the short-video platform a URL belongs to.

        Args:
            url: The URL to check

        Returns:
            VideoPlatform if the URL is a TikTok or Instagram video, None otherwise
        """
        if not url:
            return None

        url_lower = url.lower()
        for platform, signatures in VIDEO_SIGNATURES.items():
            if any(signature in url_lower for signature in signatures):
                return platform

        return None

    @classmethod
    def is_likely_recipe_url(cls, url: str) -> bool:
        """
        Check if a non-video URL is worth fetching as a recipe page.

        Args:
            url: The URL to check

        Returns:
            True if the URL should go through the webpage chain
        """
        if not url:
            return False

        url_lower = url.lower()

        if any(pattern in url_lower for pattern in SKIP_PATTERNS):
            return False

        if any(domain in url_lower for domain in RECIPE_DOMAINS):
            return True

        if any(keyword in url_lower for keyword in RECIPE_KEYWORDS):
            return True

        return cls._has_path_segment(url)

    @classmethod
    def classify(cls, url: str) -> UrlClassification:
        """
        Classify a URL as video, recipe candidate, or rejected.

        Args:
            url: Cleaned URL from a message body

        Returns:
            UrlClassification with category and, for videos, the platform
        """
        platform = cls.detect_video_platform(url)
        if platform:
            return UrlClassification(category=UrlCategory.VIDEO, platform=platform)

        if cls.is_likely_recipe_url(url):
            return UrlClassification(category=UrlCategory.RECIPE)

        return UrlClassification(category=UrlCategory.REJECTED)

    @staticmethod
    def _has_path_segment(url: str) -> bool:
        """True when the URL path has at least one non-empty segment"""
        try:
            path = urlparse(url).path
        except ValueError:
            return False
        return any(segment for segment in path.split('/'))
