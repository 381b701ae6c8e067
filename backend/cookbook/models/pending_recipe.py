"""
Family Cookbook Backend — Pending Submission Model
====================================================

What:  ORM model for the `pending_recipes` moderation queue.
Who:   Written by the upload endpoint; read, published and deleted by
       moderators through PendingService.

Status Transitions (one-way):
    pending ──publish──▶ published
    pending/published ──delete──▶ (row removed)

    There is no "rejected" state. A rejected submission is deleted.
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Index, Integer, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from cookbook.database import Base, utcnow


class PendingStatus(str, enum.Enum):
    PENDING = "pending"
    PUBLISHED = "published"


class PendingRecipe(Base):
    """
    An uploaded document awaiting moderator review.

    raw_text holds the text extracted from the document, unedited. The
    moderator copies what they need from it into the recipe fields when
    publishing.
    """

    __tablename__ = "pending_recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    raw_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    file_name: Mapped[str] = mapped_column(String(255), nullable=False)
    submitter_name: Mapped[str] = mapped_column(String(120), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PendingStatus.PENDING.value,
        server_default=text("'pending'"),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_pending_recipes_status_created", "status", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<PendingRecipe(id={self.id}, status='{self.status}')>"
