"""
Family Cookbook Backend — Recipe Routes
=========================================

What:  Public browsing plus visitor ratings/comments, and the logged-in
       shortcut for adding a recipe without moderation.

Route Inventory:
    GET  /api/recipes?search=        public   list with avgRating/ratingCount
    GET  /api/recipes/{id}           public   detail + comments (404 if absent)
    POST /api/recipes                session  create directly
    POST /api/recipes/{id}/rate      public   {rating: 1-5, userName?}
    POST /api/recipes/{id}/comment   public   {comment, userName?}
    GET  /api/categories             public   distinct categories

Ratings and comments need no login: the UI lets any visitor add
them under whatever name they type, defaulting to "Anonymous".
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.database import get_db_session
from cookbook.dependencies import require_identity
from cookbook.schemas.common import CreatedResponse, ErrorResponse, SuccessResponse
from cookbook.schemas.recipe import (
    CommentRequest,
    RatingRequest,
    RecipeDetailResponse,
    RecipeFields,
    RecipeResponse,
)
from cookbook.services.auth_service import Identity
from cookbook.services.recipe_service import recipe_service

router = APIRouter(prefix="/api", tags=["Recipes"])

_not_found = {404: {"description": "No such recipe", "model": ErrorResponse}}


@router.get(
    "/recipes",
    response_model=List[RecipeResponse],
    summary="List recipes, optionally searching title and ingredients",
)
async def list_recipes(
    search: Optional[str] = Query(
        default=None,
        max_length=200,
        description="Substring matched against title or ingredients",
    ),
    db: AsyncSession = Depends(get_db_session),
) -> List[RecipeResponse]:
    return await recipe_service.list_recipes(db, search=search)


@router.get(
    "/recipes/{recipe_id}",
    response_model=RecipeDetailResponse,
    responses=_not_found,
    summary="Get a recipe with ratings and comments",
)
async def get_recipe(
    recipe_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> RecipeDetailResponse:
    return await recipe_service.get_recipe(db, recipe_id)


@router.post(
    "/recipes",
    response_model=CreatedResponse,
    responses={401: {"description": "Authentication required", "model": ErrorResponse}},
    summary="Create a recipe directly (no moderation)",
)
async def create_recipe(
    fields: RecipeFields,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CreatedResponse:
    recipe = await recipe_service.create_recipe(db, fields, author_name=identity.display_name)
    return CreatedResponse(id=recipe.id)


@router.post(
    "/recipes/{recipe_id}/rate",
    response_model=SuccessResponse,
    responses=_not_found,
    summary="Rate a recipe from 1 to 5",
)
async def rate_recipe(
    recipe_id: int,
    body: RatingRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await recipe_service.rate_recipe(db, recipe_id, body.rating, body.display_name)
    return SuccessResponse()


@router.post(
    "/recipes/{recipe_id}/comment",
    response_model=SuccessResponse,
    responses=_not_found,
    summary="Comment on a recipe",
)
async def comment_recipe(
    recipe_id: int,
    body: CommentRequest,
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await recipe_service.comment_recipe(db, recipe_id, body.display_name, body.comment)
    return SuccessResponse()


@router.get(
    "/categories",
    response_model=List[str],
    summary="Distinct recipe categories",
)
async def list_categories(db: AsyncSession = Depends(get_db_session)) -> List[str]:
    return await recipe_service.list_categories(db)
