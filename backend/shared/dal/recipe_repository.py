"""Abstract interface for recipe persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from shared.dal.models import Recipe, RecipeDraft


class RecipeRepository(ABC):
    """Abstract interface for recipe persistence."""

    @abstractmethod
    async def create_recipe(self, draft: RecipeDraft, owner_id: str | None = None) -> Recipe: ...

    @abstractmethod
    async def get_recipe(self, recipe_id: int) -> Recipe | None: ...

    @abstractmethod
    async def list_recipes(self, owner_id: str | None = None) -> list[Recipe]: ...

    @abstractmethod
    async def update_recipe(self, recipe_id: int, draft: RecipeDraft) -> Recipe | None: ...

    @abstractmethod
    async def delete_recipe(self, recipe_id: int) -> bool: ...
