"""
Paprika recipe manager client (sync API v1, HTTP basic auth).

Recipes are uploaded as a gzipped JSON record in a multipart "data" field,
which is the format the Paprika apps themselves sync with.
"""
import gzip
import json
import logging
import secrets
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from recipe_inbox.core.config import get_settings
from recipe_inbox.domain.exceptions import RecipeManagerError
from recipe_inbox.domain.models import ExtractedRecipe

logger = logging.getLogger(__name__)

CREATED_FORMAT = "%Y-%m-%d %H:%M:%S"


def generate_uid() -> str:
    """Uppercase UUID4, matching the uids the Paprika apps create"""
    return str(uuid.uuid4()).upper()


def generate_hash() -> str:
    """Random 64 hex digit uppercase sync hash"""
    return secrets.token_hex(32).upper()


def build_paprika_record(
    recipe: ExtractedRecipe,
    uid: Optional[str] = None,
    created: Optional[datetime] = None,
) -> Dict[str, Any]:
    """
    Build the full record Paprika expects from an extracted recipe.

    Args:
        recipe: Normalized recipe
        uid: Record uid, generated when omitted
        created: Creation time, now (UTC) when omitted

    Returns:
        Dict with every Paprika recipe field populated
    """
    created = created or datetime.now(timezone.utc)

    return {
        "uid": uid or generate_uid(),
        "name": recipe.name,
        "ingredients": recipe.ingredients,
        "directions": recipe.directions,
        "description": "",
        "notes": recipe.notes,
        "nutritional_info": "",
        "prep_time": recipe.prep_time,
        "cook_time": recipe.cook_time,
        "total_time": "",
        "difficulty": "",
        "servings": recipe.servings,
        "rating": 0,
        "source": recipe.source,
        "source_url": recipe.source_url or "",
        "photo": None,
        "photo_hash": None,
        "photo_large": None,
        "photo_url": None,
        "image_url": recipe.image_url or None,
        "categories": [],
        "hash": generate_hash(),
        "created": created.strftime(CREATED_FORMAT),
        "on_favorites": False,
        "on_grocery_list": False,
        "in_trash": False,
        "is_pinned": False,
        "scale": None,
    }


class PaprikaService:
    """Recipe-manager sink backed by the Paprika sync API"""

    def __init__(
        self,
        email: Optional[str] = None,
        password: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
    ):
        settings = get_settings()
        email = email or settings.PAPRIKA_EMAIL
        password = password or settings.PAPRIKA_PASSWORD
        if not email or not password:
            raise ValueError(
                "PAPRIKA_EMAIL and PAPRIKA_PASSWORD environment variables are required for PaprikaService. "
                "Please set them in your .env file."
            )

        self._auth = httpx.BasicAuth(email, password)
        self.base_url = (base_url or settings.PAPRIKA_API_URL).rstrip("/")
        self.timeout = timeout

    async def create_recipe(self, recipe: ExtractedRecipe) -> str:
        """
        Create a recipe in Paprika.

        Args:
            recipe: Normalized recipe to upload

        Returns:
            Name of the created record

        Raises:
            RecipeManagerError: If Paprika rejects the upload
        """
        record = build_paprika_record(recipe)
        logger.info(f"Creating Paprika recipe {record['uid']}: {record['name']}")

        response = await self._upload(record)
        logger.debug(f"Paprika API response: {response.status_code} {response.text}")

        if response.status_code >= 400:
            raise RecipeManagerError(
                f"Failed to create recipe: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        return record["name"]

    async def list_recipes(self) -> List[Dict[str, Any]]:
        """List uid/hash pairs for every recipe in the account"""
        data = await self._get_json("/sync/recipes/", "Failed to list recipes")
        return data.get("result") or []

    async def get_recipe(self, uid: str) -> Dict[str, Any]:
        """Fetch one full recipe record"""
        data = await self._get_json(f"/sync/recipe/{uid}/", "Failed to get recipe")
        return data.get("result") or {}

    async def delete_recipe(self, uid: str) -> None:
        """
        Delete a recipe.

        Paprika has no delete call; the record is re-uploaded with in_trash set.
        """
        existing = await self.get_recipe(uid)
        record = {**existing, "in_trash": True}

        response = await self._upload(record, uid=uid)
        if response.status_code >= 400:
            raise RecipeManagerError(
                f"Failed to delete recipe: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )
        logger.info(f"Moved Paprika recipe {uid} to trash")

    async def authenticate(self) -> None:
        """
        Check the credentials by listing recipes.

        Raises:
            RecipeManagerError: If authentication fails or the response is unexpected
        """
        data = await self._get_json("/sync/recipes/", "Paprika authentication failed")
        if not data.get("result"):
            raise RecipeManagerError("Invalid response from Paprika API")

    # ========================================
    # HTTP helpers
    # ========================================

    async def _upload(self, record: Dict[str, Any], uid: Optional[str] = None) -> httpx.Response:
        uid = uid or record["uid"]
        compressed = gzip.compress(json.dumps(record).encode("utf-8"))
        logger.debug(f"Compressed recipe size: {len(compressed)} bytes")

        files = {"data": (f"{uid}.paprikarecipe", compressed, "application/gzip")}
        async with httpx.AsyncClient(auth=self._auth, timeout=self.timeout) as client:
            return await client.post(f"{self.base_url}/sync/recipe/{uid}/", files=files)

    async def _get_json(self, path: str, error_prefix: str) -> Dict[str, Any]:
        async with httpx.AsyncClient(auth=self._auth, timeout=self.timeout) as client:
            response = await client.get(f"{self.base_url}{path}")

        if response.status_code >= 400:
            raise RecipeManagerError(
                f"{error_prefix}: {response.status_code} - {response.text}",
                status_code=response.status_code,
                body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise RecipeManagerError("Invalid response from Paprika API", status_code=response.status_code) from e

        if not isinstance(data, dict):
            raise RecipeManagerError("Invalid response from Paprika API", status_code=response.status_code)
        return data
