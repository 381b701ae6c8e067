"""
Family Cookbook Backend — Recipe Service
==========================================

What:  Browse, search, create, rate and comment on published recipes.
How:   Stateless; every method receives the request's AsyncSession.
Who:   Called by routes/recipes.py.

Rating aggregates:
    Computed in SQL with one grouped subquery outer-joined to recipes:

        SELECT recipes.*, COALESCE(s.avg_rating, 0), COALESCE(s.rating_count, 0)
        FROM recipes
        LEFT JOIN (SELECT recipe_id, AVG(rating) AS avg_rating,
                          COUNT(id) AS rating_count
                   FROM ratings GROUP BY recipe_id) s
               ON s.recipe_id = recipes.id

Search:
    Substring match on title OR ingredients via LIKE, with % and _ in the
    search term escaped. Case sensitivity follows the database: SQLite's
    LIKE ignores case for ASCII letters only.
"""

import logging
from typing import List, Optional

from sqlalchemy import desc, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cookbook.exceptions import NotFoundError
from cookbook.models.recipe import Comment, Rating, Recipe
from cookbook.schemas.recipe import (
    CommentResponse,
    RecipeDetailResponse,
    RecipeFields,
    RecipeResponse,
)

logger = logging.getLogger(__name__)


def _rating_stats():
    return (
        select(
            Rating.recipe_id.label("recipe_id"),
            func.avg(Rating.rating).label("avg_rating"),
            func.count(Rating.id).label("rating_count"),
        )
        .group_by(Rating.recipe_id)
        .subquery("rating_stats")
    )


def _recipe_with_stats():
    stats = _rating_stats()
    return select(
        Recipe,
        func.coalesce(stats.c.avg_rating, 0).label("avg_rating"),
        func.coalesce(stats.c.rating_count, 0).label("rating_count"),
    ).outerjoin(stats, stats.c.recipe_id == Recipe.id)


def _to_response(recipe: Recipe, avg_rating, rating_count, cls=RecipeResponse, **extra):
    return cls(
        id=recipe.id,
        title=recipe.title,
        description=recipe.description,
        ingredients=recipe.ingredients,
        instructions=recipe.instructions,
        prep_time=recipe.prep_time,
        cook_time=recipe.cook_time,
        servings=recipe.servings,
        category=recipe.category,
        author_name=recipe.author_name,
        created_at=recipe.created_at,
        avgRating=float(avg_rating or 0),
        ratingCount=int(rating_count or 0),
        **extra,
    )


class RecipeService:
    """Business logic for public recipes."""

    async def list_recipes(
        self, db: AsyncSession, search: Optional[str] = None
    ) -> List[RecipeResponse]:
        """All recipes (optionally filtered), newest first, with rating aggregates."""
        query = _recipe_with_stats()
        if search:
            query = query.where(
                or_(
                    Recipe.title.contains(search, autoescape=True),
                    Recipe.ingredients.contains(search, autoescape=True),
                )
            )
        query = query.order_by(desc(Recipe.created_at), desc(Recipe.id))

        result = await db.execute(query)
        return [_to_response(recipe, avg, count) for recipe, avg, count in result.all()]

    async def get_recipe(self, db: AsyncSession, recipe_id: int) -> RecipeDetailResponse:
        """
        One recipe with aggregates and its comments (newest first).

        Raises:
            NotFoundError: no recipe with that id (→ 404)
        """
        result = await db.execute(_recipe_with_stats().where(Recipe.id == recipe_id))
        row = result.one_or_none()
        if row is None:
            raise NotFoundError(resource="recipe", resource_id=recipe_id)
        recipe, avg, count = row

        comments = await db.execute(
            select(Comment)
            .where(Comment.recipe_id == recipe_id)
            .order_by(desc(Comment.created_at), desc(Comment.id))
        )
        return _to_response(
            recipe,
            avg,
            count,
            cls=RecipeDetailResponse,
            comments=[CommentResponse.model_validate(c) for c in comments.scalars().all()],
        )

    async def create_recipe(
        self, db: AsyncSession, fields: RecipeFields, author_name: str
    ) -> Recipe:
        """Insert a recipe directly, bypassing moderation."""
        recipe = Recipe(**fields.model_dump(), author_name=author_name)
        db.add(recipe)
        await db.commit()
        logger.info("Recipe %d created by %s", recipe.id, author_name)
        return recipe

    async def _require_recipe(self, db: AsyncSession, recipe_id: int) -> None:
        exists = await db.execute(select(Recipe.id).where(Recipe.id == recipe_id))
        if exists.scalar_one_or_none() is None:
            raise NotFoundError(resource="recipe", resource_id=recipe_id)

    async def rate_recipe(
        self, db: AsyncSession, recipe_id: int, rating: int, user_name: str
    ) -> Rating:
        """Append a rating. The value range is enforced by RatingRequest."""
        await self._require_recipe(db, recipe_id)
        row = Rating(recipe_id=recipe_id, rating=rating, user_name=user_name)
        db.add(row)
        await db.commit()
        return row

    async def comment_recipe(
        self, db: AsyncSession, recipe_id: int, user_name: str, comment: str
    ) -> Comment:
        await self._require_recipe(db, recipe_id)
        row = Comment(recipe_id=recipe_id, user_name=user_name, comment=comment)
        db.add(row)
        await db.commit()
        return row

    async def list_categories(self, db: AsyncSession) -> List[str]:
        """Distinct non-null categories, alphabetical."""
        result = await db.execute(
            select(Recipe.category)
            .where(Recipe.category.is_not(None))
            .distinct()
            .order_by(Recipe.category)
        )
        return list(result.scalars().all())


recipe_service = RecipeService()
