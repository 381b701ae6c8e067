"""
Family Cookbook Backend — Recipe, Rating and Comment Models
=============================================================

What:  Published recipes and the two append-only tables hanging off them.

Table Design Rationale:
    - ingredients / instructions are free-form TEXT, exactly as submitted.
    - author_name is a denormalized copy of the publishing session's display
      name, not a foreign key to users.
    - ratings.recipe_id and comments.recipe_id are indexed plain integers.
      No FOREIGN KEY constraint is declared; the services check that the
      recipe exists before appending. Recipes are never deleted, so no
      orphans arise in practice.
    - Ratings carry no per-user uniqueness: every submission is a new row.

Index on recipes.created_at:
    Every listing is ordered newest first.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cookbook.database import Base, utcnow


class Recipe(Base):
    """
    A published recipe.

    Lifecycle:
        1. Created by POST /api/recipes, or by publishing a pending submission
        2. Never updated or deleted through the API
    """

    __tablename__ = "recipes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    ingredients: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # Minutes
    prep_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cook_time: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    category: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    author_name: Mapped[Optional[str]] = mapped_column(String(120), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        Index("idx_recipes_created_at", "created_at"),
        Index("idx_recipes_category", "category"),
    )

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, title='{self.title}')>"


class Rating(Base):
    """One star rating (1-5). Append-only."""

    __tablename__ = "ratings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    user_name: Mapped[str] = mapped_column(String(120), nullable=False, default="Anonymous")


class Comment(Base):
    """A visitor comment. Append-only."""

    __tablename__ = "comments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    recipe_id: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    user_name: Mapped[str] = mapped_column(String(120), nullable=False, default="Anonymous")
    comment: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=utcnow)
