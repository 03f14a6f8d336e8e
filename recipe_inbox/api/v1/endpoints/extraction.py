"""
Recipe extraction endpoints

/process/email runs the whole pipeline on a raw message. /extract/* return
extracted records without submitting them, /import/* also submit them to
the recipe manager.
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from typing import List
import logging

from recipe_inbox.core.config import get_settings
from recipe_inbox.core.dependencies import get_extraction_service
from recipe_inbox.domain.enums import ContentType
from recipe_inbox.domain.exceptions import MalformedEmailError, UnsupportedPlatformError
from recipe_inbox.domain.models import ContentItem, ExtractedRecipe, ProcessingSummary
from recipe_inbox.services.email_parser import DEFAULT_DOCUMENT_FILENAME, DEFAULT_IMAGE_FILENAME
from recipe_inbox.services.extraction_service import ExtractionService
from recipe_inbox.api.v1.schemas.extraction import ExtractionResponse, ImportResponse, UrlRequest

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Extraction"])

DEFAULT_IMAGE_MIME_TYPE = "image/jpeg"
PDF_MIME_TYPE = "application/pdf"


async def _read_body(request: Request) -> bytes:
    """Read a raw upload body, enforcing MAX_UPLOAD_SIZE_MB"""
    body = await request.body()

    if not body:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Request body is empty"
        )

    if len(body) > get_settings().max_upload_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Upload exceeds {get_settings().MAX_UPLOAD_SIZE_MB} MB"
        )

    return body


async def _image_item(request: Request) -> ContentItem:
    content_type = request.headers.get("content-type") or DEFAULT_IMAGE_MIME_TYPE
    return ContentItem(
        type=ContentType.IMAGE,
        data=await _read_body(request),
        mime_type=content_type.split(";")[0].strip().lower(),
        filename=DEFAULT_IMAGE_FILENAME,
    )


async def _document_item(request: Request) -> ContentItem:
    return ContentItem(
        type=ContentType.DOCUMENT,
        data=await _read_body(request),
        mime_type=PDF_MIME_TYPE,
        filename=DEFAULT_DOCUMENT_FILENAME,
    )


def _bad_request(e: Exception) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=getattr(e, "message", None) or str(e)
    )


def _server_error(action: str, e: Exception) -> HTTPException:
    logger.error(f"Error during {action}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}"
    )


async def _import_single(service: ExtractionService, recipes: List[ExtractedRecipe], description: str) -> ImportResponse:
    """Submit the one record an image, url or video chain yields; declines become 400"""
    recipe = recipes[0]

    if recipe.is_declined:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={
                "message": f"Could not extract recipe from {description}",
                "notes": recipe.notes,
            }
        )

    result = await service.submit(recipe, description)
    return ImportResponse(
        message=f'Recipe "{result.recipe_name}" added to Paprika',
        results=[result]
    )


# ========================================
# Full pipeline
# ========================================

@router.post("/process/email", response_model=ProcessingSummary)
async def process_email(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service)
):
    """
    Process a raw RFC 822 message: extract every recipe it carries and
    submit them to Paprika.

    Individual item failures are reported in the summary, not as errors.
    """
    body = await _read_body(request)
    try:
        return await service.process_email(body)
    except MalformedEmailError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("process email", e)


# ========================================
# Extraction only
# ========================================

@router.post("/extract/image", response_model=ExtractionResponse)
async def extract_image(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract a recipe from a raw image body (Content-Type gives the image type)"""
    item = await _image_item(request)
    try:
        return ExtractionResponse(recipes=await service.extract_images([item]))
    except Exception as e:
        raise _server_error("extract recipe from image", e)


@router.post("/extract/document", response_model=ExtractionResponse)
async def extract_document(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract every recipe from a raw PDF body"""
    item = await _document_item(request)
    try:
        return ExtractionResponse(recipes=await service.extract_document(item))
    except Exception as e:
        raise _server_error("extract recipes from PDF", e)


@router.post("/extract/url", response_model=ExtractionResponse)
async def extract_url(
    url_request: UrlRequest,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract a recipe from a webpage"""
    try:
        return ExtractionResponse(recipes=await service.extract_url(url_request.url))
    except Exception as e:
        raise _server_error("extract recipe from URL", e)


@router.post("/extract/video", response_model=ExtractionResponse)
async def extract_video(
    url_request: UrlRequest,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract a recipe from a TikTok or Instagram video"""
    try:
        return ExtractionResponse(recipes=await service.extract_video(url_request.url))
    except UnsupportedPlatformError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("extract recipe from video", e)


# ========================================
# Extract and submit
# ========================================

@router.post("/import/image", response_model=ImportResponse)
async def import_image(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract a recipe from a raw image body and add it to Paprika"""
    item = await _image_item(request)
    try:
        recipes = await service.extract_images([item])
        return await _import_single(service, recipes, "image")
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error("import recipe from image", e)


@router.post("/import/document", response_model=ImportResponse)
async def import_document(
    request: Request,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract every recipe from a raw PDF body and add them to Paprika"""
    item = await _document_item(request)
    try:
        recipes = await service.extract_document(item)
        if not recipes:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="No recipes found in document"
            )

        results = []
        for recipe in recipes:
            results.append(await service.submit(recipe, item.filename))

        return ImportResponse(
            message=f"Processed {len(recipes)} recipe(s) from PDF",
            results=results
        )
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error("import recipes from PDF", e)


@router.post("/import/url", response_model=ImportResponse)
async def import_url(
    url_request: UrlRequest,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract a recipe from a webpage and add it to Paprika"""
    try:
        recipes = await service.extract_url(url_request.url)
        return await _import_single(service, recipes, url_request.url)
    except HTTPException:
        raise
    except Exception as e:
        raise _server_error("import recipe from URL", e)


@router.post("/import/video", response_model=ImportResponse)
async def import_video(
    url_request: UrlRequest,
    service: ExtractionService = Depends(get_extraction_service)
):
    """Extract a recipe from a TikTok or Instagram video and add it to Paprika"""
    try:
        recipes = await service.extract_video(url_request.url)
        return await _import_single(service, recipes, url_request.url)
    except HTTPException:
        raise
    except UnsupportedPlatformError as e:
        raise _bad_request(e)
    except Exception as e:
        raise _server_error("import recipe from video", e)
