"""
Recipe manager API schemas
"""
from pydantic import BaseModel
from typing import Any, Dict, List


class RecipeListResponse(BaseModel):
    """uid/hash pairs of every recipe in the account"""
    total: int
    recipes: List[Dict[str, Any]]


class RecipeResponse(BaseModel):
    """Full recipe record as stored by the recipe manager"""
    recipe: Dict[str, Any]
