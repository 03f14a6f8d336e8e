from __future__ import annotations

import base64
import gzip
import json
from datetime import datetime, timezone

import httpx
import pytest
import respx

from recipe_inbox.domain.exceptions import RecipeManagerError
from recipe_inbox.domain.models import ExtractedRecipe
from recipe_inbox.services.paprika_service import PaprikaService, build_paprika_record, generate_hash, generate_uid

BASE_URL = "https://paprika.test/api/v1"


def uploaded_record(request: httpx.Request) -> dict:
    """Unpack the gzipped JSON record from a multipart upload"""
    boundary = request.headers["Content-Type"].split("boundary=")[1].encode()
    for part in request.read().split(b"--" + boundary):
        if b'name="data"' in part:
            payload = part.split(b"\r\n\r\n", 1)[1].rsplit(b"\r\n", 1)[0]
            return json.loads(gzip.decompress(payload))
    raise AssertionError("No data field in upload")


@pytest.fixture
def service() -> PaprikaService:
    return PaprikaService(email="cook@example.com", password="secret", base_url=BASE_URL + "/", timeout=5.0)


@pytest.fixture
def recipe() -> ExtractedRecipe:
    return ExtractedRecipe(
        name="Miso Soup",
        ingredients="1 tbsp miso\n500ml dashi",
        directions="1. Warm dashi.\n2. Whisk in miso.",
        prep_time="5 min",
        cook_time="10 min",
        servings="2",
        source="Just One Cookbook",
        source_url="https://example.com/miso-soup",
        notes="Do not boil the miso",
        image_url="https://example.com/miso.jpg",
    )


class TestBuildPaprikaRecord:
    def test_maps_every_field(self, recipe: ExtractedRecipe) -> None:
        created = datetime(2024, 3, 1, 18, 30, 5, tzinfo=timezone.utc)

        record = build_paprika_record(recipe, uid="ABC-123", created=created)

        assert record["uid"] == "ABC-123"
        assert record["name"] == "Miso Soup"
        assert record["ingredients"] == recipe.ingredients
        assert record["directions"] == recipe.directions
        assert record["servings"] == "2"
        assert record["source_url"] == "https://example.com/miso-soup"
        assert record["image_url"] == "https://example.com/miso.jpg"
        assert record["created"] == "2024-03-01 18:30:05"
        assert record["in_trash"] is False
        assert record["categories"] == []
        assert record["rating"] == 0
        assert len(record["hash"]) == 64

    def test_missing_image_is_null(self) -> None:
        record = build_paprika_record(ExtractedRecipe(name="Toast"))

        assert record["image_url"] is None
        assert record["source_url"] == ""

    def test_identifiers(self) -> None:
        uid = generate_uid()

        assert uid == uid.upper()
        assert len(uid) == 36
        assert generate_hash() != generate_hash()


class TestCreateRecipe:
    @pytest.mark.asyncio
    @respx.mock
    async def test_uploads_gzipped_record(self, service: PaprikaService, recipe: ExtractedRecipe) -> None:
        route = respx.post(url__startswith=f"{BASE_URL}/sync/recipe/").mock(
            return_value=httpx.Response(200, json={"result": True})
        )

        name = await service.create_recipe(recipe)

        request = route.calls.last.request
        record = uploaded_record(request)
        assert name == "Miso Soup"
        assert record["name"] == "Miso Soup"
        assert record["notes"] == "Do not boil the miso"
        assert request.url.path == f"/api/v1/sync/recipe/{record['uid']}/"
        assert f'filename="{record["uid"]}.paprikarecipe"'.encode() in request.read()
        expected_auth = base64.b64encode(b"cook@example.com:secret").decode()
        assert request.headers["Authorization"] == f"Basic {expected_auth}"

    @pytest.mark.asyncio
    @respx.mock
    async def test_rejection_raises(self, service: PaprikaService, recipe: ExtractedRecipe) -> None:
        respx.post(url__startswith=f"{BASE_URL}/sync/recipe/").mock(return_value=httpx.Response(401, text="Unauthorized"))

        with pytest.raises(RecipeManagerError) as exc_info:
            await service.create_recipe(recipe)

        assert exc_info.value.status_code == 401
        assert exc_info.value.body == "Unauthorized"
        assert exc_info.value.message == "Failed to create recipe: 401 - Unauthorized"


class TestReadCalls:
    @pytest.mark.asyncio
    @respx.mock
    async def test_list_recipes(self, service: PaprikaService) -> None:
        entries = [{"uid": "A", "hash": "1"}, {"uid": "B", "hash": "2"}]
        respx.get(f"{BASE_URL}/sync/recipes/").mock(return_value=httpx.Response(200, json={"result": entries}))

        assert await service.list_recipes() == entries

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_recipe(self, service: PaprikaService) -> None:
        respx.get(f"{BASE_URL}/sync/recipe/A/").mock(
            return_value=httpx.Response(200, json={"result": {"uid": "A", "name": "Soup"}})
        )

        assert await service.get_recipe("A") == {"uid": "A", "name": "Soup"}

    @pytest.mark.asyncio
    @respx.mock
    async def test_get_recipe_not_found(self, service: PaprikaService) -> None:
        respx.get(f"{BASE_URL}/sync/recipe/missing/").mock(return_value=httpx.Response(404, text="Not found"))

        with pytest.raises(RecipeManagerError) as exc_info:
            await service.get_recipe("missing")

        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    @respx.mock
    async def test_authenticate(self, service: PaprikaService) -> None:
        respx.get(f"{BASE_URL}/sync/recipes/").mock(return_value=httpx.Response(200, json={"result": [{"uid": "A"}]}))

        await service.authenticate()

    @pytest.mark.asyncio
    @respx.mock
    async def test_authenticate_with_empty_result(self, service: PaprikaService) -> None:
        respx.get(f"{BASE_URL}/sync/recipes/").mock(return_value=httpx.Response(200, json={"result": []}))

        with pytest.raises(RecipeManagerError):
            await service.authenticate()

    @pytest.mark.asyncio
    @respx.mock
    async def test_non_json_response(self, service: PaprikaService) -> None:
        respx.get(f"{BASE_URL}/sync/recipes/").mock(return_value=httpx.Response(200, text="maintenance"))

        with pytest.raises(RecipeManagerError):
            await service.list_recipes()


class TestDeleteRecipe:
    @pytest.mark.asyncio
    @respx.mock
    async def test_moves_record_to_trash(self, service: PaprikaService) -> None:
        respx.get(f"{BASE_URL}/sync/recipe/A/").mock(
            return_value=httpx.Response(200, json={"result": {"uid": "A", "name": "Soup", "in_trash": False}})
        )
        upload = respx.post(f"{BASE_URL}/sync/recipe/A/").mock(return_value=httpx.Response(200, json={"result": True}))

        await service.delete_recipe("A")

        record = uploaded_record(upload.calls.last.request)
        assert record == {"uid": "A", "name": "Soup", "in_trash": True}


def test_requires_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    from recipe_inbox.core import config

    monkeypatch.setattr(config.get_settings(), "PAPRIKA_PASSWORD", "")

    with pytest.raises(ValueError):
        PaprikaService(email="cook@example.com")
