"""
Family Cookbook Backend — Moderation Queue Service
====================================================

What:  The submit → review → publish workflow for uploaded recipe documents.
How:   Stateless service; every method receives the request's AsyncSession.
Who:   Called by routes/pending.py.

Publish Flow (one transaction):
    ┌────────────────────────────┐    ┌───────────────────┐
    │ UPDATE pending_recipes     │───▶│ INSERT recipes    │──▶ COMMIT
    │ SET status = 'published'   │    │ (author = caller) │
    │ WHERE status = 'pending'   │    └───────────────────┘
    └────────────────────────────┘
          0 rows ──▶ 404 (no row) or 409 (already published)
          any failure ──▶ ROLLBACK (neither write kept)

    The outcome is reported as a PublishResult so the route can tell a
    committed publish from a rolled-back one without parsing exceptions.
"""

import enum
import logging
from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy import delete, desc, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.exceptions import ConflictError, NotFoundError
from cookbook.models.pending_recipe import PendingRecipe, PendingStatus
from cookbook.models.recipe import Recipe
from cookbook.schemas.recipe import RecipeFields
from cookbook.services.file_service import FileService

logger = logging.getLogger(__name__)


class PublishOutcome(str, enum.Enum):
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


@dataclass
class PublishResult:
    outcome: PublishOutcome
    pending_id: int
    recipe_id: Optional[int] = None
    error: Optional[str] = None

    @property
    def committed(self) -> bool:
        return self.outcome is PublishOutcome.COMMITTED


class PendingService:
    """
    Business logic for pending submissions.

    Responsibilities:
        - submit_document(): ingest an upload into the queue
        - list_pending() / count_pending(): the moderator's inbox and badge
        - get_pending(): one submission, NotFoundError when absent
        - publish(): atomic pending → recipe conversion
        - delete_pending(): drop a submission
    """

    async def submit_document(
        self,
        db: AsyncSession,
        file_service: FileService,
        filename: str,
        content: bytes,
        submitter_name: str,
        title: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> PendingRecipe:
        """
        Extract the document's text and queue it for review.

        The title falls back to the original filename when none is given.
        """
        raw_text = await file_service.extract_text(
            filename=filename,
            content=content,
            content_length=content_length,
        )

        pending = PendingRecipe(
            title=(title or "").strip() or filename,
            raw_text=raw_text,
            file_name=filename,
            submitter_name=submitter_name,
            status=PendingStatus.PENDING.value,
        )
        db.add(pending)
        await db.commit()

        logger.info("Pending recipe %d submitted by %s (%s)", pending.id, submitter_name, filename)
        return pending

    async def list_pending(self, db: AsyncSession) -> List[PendingRecipe]:
        """All submissions still awaiting review, newest first."""
        result = await db.execute(
            select(PendingRecipe)
            .where(PendingRecipe.status == PendingStatus.PENDING.value)
            .order_by(desc(PendingRecipe.created_at), desc(PendingRecipe.id))
        )
        return list(result.scalars().all())

    async def count_pending(self, db: AsyncSession) -> int:
        result = await db.execute(
            select(func.count(PendingRecipe.id)).where(
                PendingRecipe.status == PendingStatus.PENDING.value
            )
        )
        return result.scalar() or 0

    async def get_pending(self, db: AsyncSession, pending_id: int) -> PendingRecipe:
        """
        Load one submission regardless of status.

        Raises:
            NotFoundError: no row with that id (→ 404)
        """
        pending = await db.get(PendingRecipe, pending_id)
        if pending is None:
            raise NotFoundError(resource="pending recipe", resource_id=pending_id)
        return pending

    async def publish(
        self,
        db: AsyncSession,
        pending_id: int,
        fields: RecipeFields,
        author_name: str,
    ) -> PublishResult:
        """
        Turn a pending submission into a public recipe.

        Both writes share one transaction: either the recipe exists AND the
        submission is marked published, or neither change is kept.

        The status flip is a conditional UPDATE (status = 'pending' in the
        WHERE clause) issued before the recipe insert. Of two concurrent
        publishes of one submission, only one sees rowcount 1; the other
        gets 409 and inserts nothing.

        Raises:
            NotFoundError: submission does not exist (→ 404)
            ConflictError: submission was already published (→ 409)

        Returns:
            PublishResult with outcome COMMITTED (and the new recipe id) or
            ROLLED_BACK (and the error text).
        """
        try:
            claim = await db.execute(
                update(PendingRecipe)
                .where(
                    PendingRecipe.id == pending_id,
                    PendingRecipe.status == PendingStatus.PENDING.value,
                )
                .values(status=PendingStatus.PUBLISHED.value)
                .execution_options(synchronize_session=False)
            )
            claimed = bool(claim.rowcount)
            if claimed:
                recipe = Recipe(**fields.model_dump(), author_name=author_name)
                db.add(recipe)
                await db.flush()
                recipe_id = recipe.id
                await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Publishing pending recipe %d rolled back: %s", pending_id, e)
            return PublishResult(
                outcome=PublishOutcome.ROLLED_BACK,
                pending_id=pending_id,
                error=type(e).__name__,
            )

        if not claimed:
            # Nothing matched: either no such row, or it is already published
            await self.get_pending(db, pending_id)
            raise ConflictError(
                message=f"pending recipe with ID '{pending_id}' is already published",
                context={"pending_id": pending_id},
            )

        logger.info("Pending recipe %d published as recipe %d by %s", pending_id, recipe_id, author_name)
        return PublishResult(
            outcome=PublishOutcome.COMMITTED,
            pending_id=pending_id,
            recipe_id=recipe_id,
        )


    async def delete_pending(self, db: AsyncSession, pending_id: int) -> None:
        """
        Remove a submission, whatever its status.

        Raises:
            NotFoundError: no row with that id (→ 404)
        """
        result = await db.execute(delete(PendingRecipe).where(PendingRecipe.id == pending_id))
        if not result.rowcount:
            raise NotFoundError(resource="pending recipe", resource_id=pending_id)
        await db.commit()
        logger.info("Pending recipe %d deleted", pending_id)


pending_service = PendingService()
