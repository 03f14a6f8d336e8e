"""
Recipe manager (Paprika) passthrough endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
import logging

from recipe_inbox.core.dependencies import get_paprika_service
from recipe_inbox.domain.exceptions import RecipeManagerError
from recipe_inbox.services.paprika_service import PaprikaService
from recipe_inbox.api.v1.schemas.common import MessageResponse
from recipe_inbox.api.v1.schemas.recipe import RecipeListResponse, RecipeResponse

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/recipes", tags=["Recipes"])


def _manager_error(action: str, e: Exception) -> HTTPException:
    if isinstance(e, RecipeManagerError) and e.status_code == status.HTTP_404_NOT_FOUND:
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recipe not found"
        )

    logger.error(f"Error during {action}: {str(e)}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Failed to {action}: {str(e)}"
    )


@router.get("", response_model=RecipeListResponse)
async def list_recipes(paprika: PaprikaService = Depends(get_paprika_service)):
    """List uid/hash pairs of every recipe in the Paprika account"""
    try:
        recipes = await paprika.list_recipes()
        return RecipeListResponse(total=len(recipes), recipes=recipes)
    except Exception as e:
        raise _manager_error("list recipes", e)


@router.post("/check-auth", response_model=MessageResponse)
async def check_auth(paprika: PaprikaService = Depends(get_paprika_service)):
    """Verify the configured Paprika credentials"""
    try:
        await paprika.authenticate()
        return MessageResponse(message="Paprika authentication successful")
    except Exception as e:
        raise _manager_error("authenticate with Paprika", e)


@router.get("/{uid}", response_model=RecipeResponse)
async def get_recipe(uid: str, paprika: PaprikaService = Depends(get_paprika_service)):
    """Get one full recipe record"""
    try:
        recipe = await paprika.get_recipe(uid)
    except Exception as e:
        raise _manager_error("get recipe", e)

    if not recipe:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Recipe not found"
        )
    return RecipeResponse(recipe=recipe)


@router.delete("/{uid}", response_model=MessageResponse)
async def delete_recipe(uid: str, paprika: PaprikaService = Depends(get_paprika_service)):
    """Move a recipe to the Paprika trash"""
    try:
        recipe = await paprika.get_recipe(uid)
        if not recipe:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Recipe not found"
            )

        await paprika.delete_recipe(uid)
        return MessageResponse(message=f'Recipe "{recipe.get("name", uid)}" moved to trash')
    except HTTPException:
        raise
    except Exception as e:
        raise _manager_error("delete recipe", e)
