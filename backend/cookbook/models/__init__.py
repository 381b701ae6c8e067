"""ORM models. Importing this package registers every table with Base.metadata."""

from cookbook.models.pending_recipe import PendingRecipe, PendingStatus
from cookbook.models.recipe import Comment, Rating, Recipe
from cookbook.models.user import User, UserSession

__all__ = [
    "Comment",
    "PendingRecipe",
    "PendingStatus",
    "Rating",
    "Recipe",
    "User",
    "UserSession",
]
