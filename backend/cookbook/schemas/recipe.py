"""
Family Cookbook Backend — Recipe Request/Response Schemas
===========================================================

What:  Pydantic models defining the recipe, rating and comment API contract.
How:   FastAPI validates request bodies against these models (422 on failure)
       and serializes responses through them.

Naming:
    Recipe columns keep their snake_case database names (prep_time,
    author_name, ...). The two computed aggregates use camelCase
    (avgRating, ratingCount), as do the visitor fields (userName), matching
    what the browser UI sends and reads.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

# Inclusive bounds for a star rating
MIN_RATING = 1
MAX_RATING = 5

ANONYMOUS = "Anonymous"


# ══════════════════════════════════════════════════════════════════════════
# Request Models
# ══════════════════════════════════════════════════════════════════════════


class RecipeFields(BaseModel):
    """
    What:  The editable recipe fields.
    Who:   Body of POST /api/recipes and POST /api/pending-recipes/{id}/publish.

    Only title is required. Times are minutes; all counts are non-negative.
    A blank category is stored as NULL so it never shows up in /api/categories.
    """
    title: str = Field(min_length=1, max_length=255)
    description: Optional[str] = None
    ingredients: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = Field(default=None, ge=0)
    cook_time: Optional[int] = Field(default=None, ge=0)
    servings: Optional[int] = Field(default=None, ge=0)
    category: Optional[str] = Field(default=None, max_length=100)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped

    @field_validator("category")
    @classmethod
    def blank_category_is_none(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        stripped = v.strip()
        return stripped or None


class RatingRequest(BaseModel):
    """Body of POST /api/recipes/{id}/rate."""
    rating: int = Field(ge=MIN_RATING, le=MAX_RATING, description="Stars, 1 to 5")
    userName: Optional[str] = Field(default=None, max_length=120)

    @property
    def display_name(self) -> str:
        return (self.userName or "").strip() or ANONYMOUS


class CommentRequest(BaseModel):
    """Body of POST /api/recipes/{id}/comment."""
    comment: str = Field(min_length=1, max_length=5000)
    userName: Optional[str] = Field(default=None, max_length=120)

    @field_validator("comment")
    @classmethod
    def comment_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("comment must not be blank")
        return v

    @property
    def display_name(self) -> str:
        return (self.userName or "").strip() or ANONYMOUS


# ══════════════════════════════════════════════════════════════════════════
# Response Models
# ══════════════════════════════════════════════════════════════════════════


class CommentResponse(BaseModel):
    id: int
    recipe_id: int
    user_name: str
    comment: str
    created_at: datetime

    model_config = {"from_attributes": True}


class RecipeResponse(BaseModel):
    """
    What:  A recipe with its rating aggregates.
    Who:   Items of GET /api/recipes.

    avgRating is the mean of all ratings (0 when there are none);
    ratingCount is the number of rating rows (0 when there are none).
    """
    id: int
    title: str
    description: Optional[str] = None
    ingredients: Optional[str] = None
    instructions: Optional[str] = None
    prep_time: Optional[int] = None
    cook_time: Optional[int] = None
    servings: Optional[int] = None
    category: Optional[str] = None
    author_name: Optional[str] = None
    created_at: datetime
    avgRating: float = 0
    ratingCount: int = 0


class RecipeDetailResponse(RecipeResponse):
    """GET /api/recipes/{id}: the recipe plus its comments, newest first."""
    comments: List[CommentResponse] = Field(default_factory=list)
