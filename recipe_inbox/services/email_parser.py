"""
Email content extractor.

Splits a raw MIME message into classified content items:
- image and PDF attachments (allow-listed media types only)
- recipe page links found in the text and HTML bodies
- TikTok / Instagram video links found in the same bodies
"""
import logging
import re
from email import errors, policy
from email.message import EmailMessage
from email.parser import BytesParser
from typing import List, Union

from recipe_inbox.domain.enums import ContentType, UrlCategory
from recipe_inbox.domain.exceptions import MalformedEmailError
from recipe_inbox.domain.models import ContentItem, ParsedEmailContent
from recipe_inbox.services.url_classifier import URLClassifier

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_TYPES = {
    'image/jpeg',
    'image/jpg',
    'image/png',
    'image/gif',
    'image/webp',
    'image/heic',
    'image/heif',
}

SUPPORTED_DOCUMENT_TYPES = {
    'application/pdf',
}

DEFAULT_IMAGE_FILENAME = "image"
DEFAULT_DOCUMENT_FILENAME = "document.pdf"

URL_PATTERN = re.compile(r'https?://[^\s<>"{}|\\^`\[\]]+', re.IGNORECASE)
TRAILING_PUNCTUATION = re.compile(r'[.,;:!?)\]]+$')

# Structural defects that mean the multipart tree cannot be trusted
FATAL_DEFECTS = (
    errors.NoBoundaryInMultipartDefect,
    errors.StartBoundaryNotFoundDefect,
    errors.MultipartInvariantViolationDefect,
)


def clean_url(url: str) -> str:
    """Strip trailing sentence punctuation picked up by the URL pattern"""
    return TRAILING_PUNCTUATION.sub('', url)


class EmailContentExtractor:
    """Parse an email and extract every processable content item"""

    def parse(self, raw_email: Union[bytes, str]) -> ParsedEmailContent:
        """
        Parse a raw email into images, documents, urls and videos.

        Args:
            raw_email: Raw RFC 822 message as bytes or text

        Returns:
            ParsedEmailContent with four ordered buckets

        Raises:
            MalformedEmailError: If the message cannot be parsed as MIME
        """
        message = self._parse_message(raw_email)

        content = ParsedEmailContent()
        body_parts: List[str] = []

        for part in message.walk():
            if part.is_multipart():
                continue

            if self._is_body_part(part):
                body_parts.append(self._get_text(part))
                continue

            self._classify_attachment(part, content)

        body_text = " ".join(body_parts)
        self._classify_urls(body_text, content)

        logger.info(
            f"Parsed email: {len(content.images)} image(s), {len(content.documents)} document(s), "
            f"{len(content.urls)} URL(s), {len(content.videos)} video(s)"
        )
        return content

    def _parse_message(self, raw_email: Union[bytes, str]) -> EmailMessage:
        if isinstance(raw_email, str):
            raw_email = raw_email.encode("utf-8", errors="surrogateescape")
        if not isinstance(raw_email, (bytes, bytearray)):
            raise MalformedEmailError(f"Unsupported email payload type: {type(raw_email).__name__}")
        if not raw_email.strip():
            raise MalformedEmailError("Email payload is empty")

        try:
            message = BytesParser(policy=policy.default).parsebytes(bytes(raw_email))
        except (errors.MessageError, ValueError) as e:
            raise MalformedEmailError(f"Failed to parse email: {e}") from e

        for part in message.walk():
            for defect in part.defects:
                if isinstance(defect, FATAL_DEFECTS):
                    raise MalformedEmailError(f"Malformed MIME structure: {defect.__class__.__name__}")

        return message

    def _is_body_part(self, part: EmailMessage) -> bool:
        """Text and HTML parts that are not attachments make up the body"""
        if part.get_content_type() not in ('text/plain', 'text/html'):
            return False
        return part.get_content_disposition() != 'attachment' and not part.get_filename()

    def _get_text(self, part: EmailMessage) -> str:
        try:
            return part.get_content()
        except LookupError:
            # Unknown charset declared on the part
            payload = part.get_payload(decode=True) or b""
            return payload.decode("utf-8", errors="replace")

    def _classify_attachment(self, part: EmailMessage, content: ParsedEmailContent) -> None:
        mime_type = part.get_content_type().lower()

        if mime_type in SUPPORTED_IMAGE_TYPES:
            content.images.append(ContentItem(
                type=ContentType.IMAGE,
                data=part.get_payload(decode=True) or b"",
                mime_type=mime_type,
                filename=part.get_filename() or DEFAULT_IMAGE_FILENAME,
            ))
        elif mime_type in SUPPORTED_DOCUMENT_TYPES:
            content.documents.append(ContentItem(
                type=ContentType.DOCUMENT,
                data=part.get_payload(decode=True) or b"",
                mime_type=mime_type,
                filename=part.get_filename() or DEFAULT_DOCUMENT_FILENAME,
            ))
        else:
            logger.debug(f"Skipping unsupported attachment type: {mime_type}")

    def _classify_urls(self, body_text: str, content: ParsedEmailContent) -> None:
        seen = set()

        for match in URL_PATTERN.findall(body_text):
            url = clean_url(match)
            if url in seen:
                continue
            seen.add(url)

            classification = URLClassifier.classify(url)
            if classification.category == UrlCategory.VIDEO:
                content.videos.append(ContentItem(
                    type=ContentType.VIDEO,
                    data=url,
                    platform=classification.platform,
                ))
            elif classification.category == UrlCategory.RECIPE:
                content.urls.append(ContentItem(type=ContentType.URL, data=url))
            else:
                logger.debug(f"Skipping non-recipe URL: {url}")
