"""
Service providers for FastAPI dependency injection
"""
from functools import lru_cache
import logging

from fastapi import HTTPException, status

from recipe_inbox.services.extraction_service import ExtractionService
from recipe_inbox.services.paprika_service import PaprikaService

logger = logging.getLogger(__name__)


@lru_cache()
def _build_extraction_service() -> ExtractionService:
    return ExtractionService.from_settings()


@lru_cache()
def _build_paprika_service() -> PaprikaService:
    return PaprikaService()


def get_extraction_service() -> ExtractionService:
    """Get the shared extraction service (built on first use)"""
    try:
        return _build_extraction_service()
    except ValueError as e:
        logger.error(f"Extraction service is not configured: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )


def get_paprika_service() -> PaprikaService:
    """Get the shared Paprika client (built on first use)"""
    try:
        return _build_paprika_service()
    except ValueError as e:
        logger.error(f"Paprika client is not configured: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(e)
        )
