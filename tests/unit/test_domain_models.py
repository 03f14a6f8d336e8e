from __future__ import annotations

import pytest
from pydantic import ValidationError

from recipe_inbox.domain.enums import ContentType, VideoPlatform
from recipe_inbox.domain.models import (
    ContentItem,
    ExtractedRecipe,
    ParsedEmailContent,
    ProcessingResult,
    ProcessingSummary,
)


class TestContentItem:
    def test_binary_items_carry_bytes(self) -> None:
        item = ContentItem(type=ContentType.IMAGE, data=b"\xff\xd8\xff", mime_type="image/jpeg")

        assert item.data == b"\xff\xd8\xff"

    def test_link_items_carry_text(self) -> None:
        item = ContentItem(type=ContentType.VIDEO, data="https://vm.tiktok.com/abc/", platform=VideoPlatform.TIKTOK)

        assert item.platform == VideoPlatform.TIKTOK

    def test_document_with_text_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContentItem(type=ContentType.DOCUMENT, data="not bytes")

    def test_url_with_bytes_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ContentItem(type=ContentType.URL, data=b"https://example.com")


class TestParsedEmailContent:
    def test_total_items(self) -> None:
        content = ParsedEmailContent(
            images=[ContentItem(type=ContentType.IMAGE, data=b"a"), ContentItem(type=ContentType.IMAGE, data=b"b")],
            urls=[ContentItem(type=ContentType.URL, data="https://example.com/recipes/x")],
        )

        assert content.total_items == 3
        assert ParsedEmailContent().total_items == 0


class TestExtractedRecipe:
    def test_defaults(self) -> None:
        recipe = ExtractedRecipe()

        assert recipe.name == ""
        assert recipe.image_url is None
        assert recipe.is_declined is False

    @pytest.mark.parametrize("name", ["UNREADABLE", "NO_RECIPE"])
    def test_sentinels_are_declines(self, name: str) -> None:
        assert ExtractedRecipe(name=name).is_declined is True


class TestProcessingSummary:
    def test_partitions_results(self) -> None:
        summary = ProcessingSummary(results=[
            ProcessingResult(success=True, source="1 image(s)", recipe_name="Cake"),
            ProcessingResult(success=False, source="book.pdf", error="boom"),
            ProcessingResult(success=True, source="https://example.com/r", recipe_name="Pie"),
        ])

        assert [r.recipe_name for r in summary.succeeded] == ["Cake", "Pie"]
        assert [r.source for r in summary.failed] == ["book.pdf"]
        assert summary.model_dump()["succeeded_count"] == 2
        assert summary.model_dump()["failed_count"] == 1
