"""Persistence models for the data access layer."""

from datetime import datetime

from pydantic import BaseModel, Field

TITLE_MAX_LENGTH = 200
MAX_STORED_INT = 2**63 - 1  # signed 64-bit, the widest integer column


class RecipeDraft(BaseModel, frozen=True):
    """Caller-supplied recipe fields, used for both creation and full replacement."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    ingredients: str = Field(min_length=1)  # free text, one ingredient per line by convention
    instructions: str = Field(min_length=1)
    prep_time: int | None = Field(default=None, ge=0, le=MAX_STORED_INT)  # minutes
    cook_time: int | None = Field(default=None, ge=0, le=MAX_STORED_INT)  # minutes
    servings: int | None = Field(default=None, ge=1, le=MAX_STORED_INT)


class Recipe(RecipeDraft, frozen=True):
    """Recipe record as stored, joined with its author's username on read."""

    recipe_id: int
    owner_id: str | None = None  # None for anonymous recipes
    created_at: datetime
    author: str | None = None

    def public(self) -> dict:
        """Return the JSON-safe projection exposed by the API."""
        return {
            "id": self.recipe_id,
            "title": self.title,
            "ingredients": self.ingredients,
            "instructions": self.instructions,
            "prep_time": self.prep_time,
            "cook_time": self.cook_time,
            "servings": self.servings,
            "created_at": self.created_at.isoformat(),
            "user_id": self.owner_id,
            "author": self.author,
        }
