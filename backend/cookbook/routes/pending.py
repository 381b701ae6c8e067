"""
Family Cookbook Backend — Moderation Routes
=============================================

What:  Document upload and the pending-submission queue. Every route here
       sits behind the auth gate (require_identity → 401).

Route Inventory:
    POST   /api/upload-document                 multipart: document, title?
    GET    /api/pending-recipes                 pending rows, newest first
    GET    /api/pending-recipes/count           {"count": n} for the badge
    GET    /api/pending-recipes/{id}            one row (404 if absent)
    POST   /api/pending-recipes/{id}/publish    recipe fields → new recipe
    DELETE /api/pending-recipes/{id}            drop a submission

Upload request flow:
    1. UploadSizeLimitMiddleware rejects an oversized body (413)
    2. require_identity rejects anonymous callers (401)
    3. PendingService → FileService: type check (415), size (413), extract
    4. Temporary file removed; PendingRecipe stored with status=pending
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.database import get_db_session
from cookbook.dependencies import get_file_service, require_identity
from cookbook.exceptions import DatabaseError
from cookbook.schemas.common import CountResponse, CreatedResponse, ErrorResponse, SuccessResponse
from cookbook.schemas.pending import PendingRecipeResponse
from cookbook.schemas.recipe import RecipeFields
from cookbook.services.auth_service import Identity
from cookbook.services.file_service import FileService
from cookbook.services.pending_service import pending_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api",
    tags=["Moderation"],
    responses={401: {"description": "Authentication required", "model": ErrorResponse}},
)


@router.post(
    "/upload-document",
    response_model=CreatedResponse,
    responses={
        400: {"description": "Empty file", "model": ErrorResponse},
        413: {"description": "File larger than the upload cap", "model": ErrorResponse},
        415: {"description": "Not a .txt, .docx or .pdf file", "model": ErrorResponse},
        500: {"description": "Text extraction failed", "model": ErrorResponse},
    },
    summary="Submit a recipe document for moderation",
)
async def upload_document(
    document: UploadFile = File(..., description="Recipe document (.txt, .docx or .pdf, max 10MB)"),
    title: Optional[str] = Form(default=None),
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
    file_service: FileService = Depends(get_file_service),
) -> CreatedResponse:
    filename = document.filename or "upload"
    try:
        file_service.check_declared_size(document.size)
        content = await document.read()
        logger.info("Received upload: filename=%s, size=%d bytes", filename, len(content))

        pending = await pending_service.submit_document(
            db=db,
            file_service=file_service,
            filename=filename,
            content=content,
            submitter_name=identity.display_name,
            title=title,
            content_length=document.size,
        )
    finally:
        await document.close()

    return CreatedResponse(id=pending.id)


@router.get(
    "/pending-recipes",
    response_model=List[PendingRecipeResponse],
    summary="List submissions awaiting review",
)
async def list_pending(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> List[PendingRecipeResponse]:
    rows = await pending_service.list_pending(db)
    return [PendingRecipeResponse.model_validate(row) for row in rows]


# Declared before /{pending_id} so "count" is not parsed as an id
@router.get(
    "/pending-recipes/count",
    response_model=CountResponse,
    summary="Number of submissions awaiting review",
)
async def count_pending(
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CountResponse:
    return CountResponse(count=await pending_service.count_pending(db))


@router.get(
    "/pending-recipes/{pending_id}",
    response_model=PendingRecipeResponse,
    responses={404: {"description": "No such submission", "model": ErrorResponse}},
    summary="Get one submission",
)
async def get_pending(
    pending_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> PendingRecipeResponse:
    row = await pending_service.get_pending(db, pending_id)
    return PendingRecipeResponse.model_validate(row)


@router.post(
    "/pending-recipes/{pending_id}/publish",
    response_model=CreatedResponse,
    responses={
        404: {"description": "No such submission", "model": ErrorResponse},
        409: {"description": "Already published", "model": ErrorResponse},
        500: {"description": "Publish rolled back", "model": ErrorResponse},
    },
    summary="Publish a submission as a public recipe",
)
async def publish_pending(
    pending_id: int,
    fields: RecipeFields,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> CreatedResponse:
    result = await pending_service.publish(
        db=db,
        pending_id=pending_id,
        fields=fields,
        author_name=identity.display_name,
    )
    if not result.committed:
        raise DatabaseError(
            message="The recipe could not be published. Nothing was changed; please try again.",
            context={"pending_id": pending_id, "error": result.error},
        )
    return CreatedResponse(id=result.recipe_id)


@router.delete(
    "/pending-recipes/{pending_id}",
    response_model=SuccessResponse,
    responses={404: {"description": "No such submission", "model": ErrorResponse}},
    summary="Delete a submission",
)
async def delete_pending(
    pending_id: int,
    identity: Identity = Depends(require_identity),
    db: AsyncSession = Depends(get_db_session),
) -> SuccessResponse:
    await pending_service.delete_pending(db, pending_id)
    return SuccessResponse()
