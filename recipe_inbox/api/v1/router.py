"""
Main API v1 router
"""
from fastapi import APIRouter

from recipe_inbox.api.v1.endpoints import extraction, recipes

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(extraction.router)
api_router.include_router(recipes.router)
