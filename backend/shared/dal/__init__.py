"""Data access layer: repository interfaces and shared persistence models."""

from shared.dal.models import Recipe, RecipeDraft
from shared.dal.recipe_repository import RecipeRepository
from shared.dal.user_repository import UserRepository

__all__ = [
    "Recipe",
    "RecipeDraft",
    "RecipeRepository",
    "UserRepository",
]
