"""Recipe service: validation, lookup, and ownership-gated mutation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from pydantic import ValidationError as PydanticValidationError

from cookbook.recipes.types import REQUIRED_FIELDS, RecipeInput
from shared.auth.ownership import ensure_owner
from shared.errors import NotFoundError, ValidationError

if TYPE_CHECKING:
    from shared.dal.models import Recipe
    from shared.dal.recipe_repository import RecipeRepository

logger = structlog.get_logger()

RECIPE_NOT_FOUND = "Recipe not found"
MISSING_REQUIRED = "Title, ingredients, and instructions are required"


def parse_recipe_input(data: dict) -> RecipeInput:
    """Validate a client payload, raising ValidationError with a readable message."""
    try:
        return RecipeInput.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError(_describe(e)) from e


def _describe(exc: PydanticValidationError) -> str:
    errors = exc.errors()
    for err in errors:
        field = err["loc"][0] if err["loc"] else None
        if field in REQUIRED_FIELDS and err["type"] in {"missing", "string_too_short", "string_type"}:
            return MISSING_REQUIRED
    return "; ".join(f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in errors)


class RecipeService:
    """Recipe operations on top of a RecipeRepository.

    Reads are public. Updates and deletes resolve the recipe first (404) and
    then require the acting user to own it (403).
    """

    def __init__(self, recipe_repo: RecipeRepository) -> None:
        self._recipe_repo = recipe_repo

    async def list_recipes(self) -> list[Recipe]:
        return await self._recipe_repo.list_recipes()

    async def list_for_owner(self, user_id: str) -> list[Recipe]:
        return await self._recipe_repo.list_recipes(owner_id=user_id)

    async def get_recipe(self, recipe_id: int) -> Recipe:
        recipe = await self._recipe_repo.get_recipe(recipe_id)
        if recipe is None:
            raise NotFoundError(RECIPE_NOT_FOUND)
        return recipe

    async def get_owned_recipe(self, recipe_id: int, actor_id: str, *, action: str = "modify") -> Recipe:
        """Resolve a recipe (404) and require actor_id to own it (403)."""
        recipe = await self.get_recipe(recipe_id)
        ensure_owner(actor_id, recipe.owner_id, action=action)
        return recipe

    async def create_recipe(self, data: dict, owner_id: str | None = None) -> Recipe:
        """Validate and store a new recipe; owner_id None creates an anonymous recipe."""
        draft = parse_recipe_input(data)
        recipe = await self._recipe_repo.create_recipe(draft, owner_id=owner_id)
        logger.info("recipe created", recipe_id=recipe.recipe_id, owner_id=owner_id)
        return recipe

    async def update_recipe(self, recipe_id: int, data: dict, actor_id: str) -> Recipe:
        """Replace every editable field of a recipe owned by actor_id."""
        await self.get_owned_recipe(recipe_id, actor_id, action="update")
        draft = parse_recipe_input(data)

        updated = await self._recipe_repo.update_recipe(recipe_id, draft)
        if updated is None:
            # Deleted between the ownership check and the write.
            raise NotFoundError(RECIPE_NOT_FOUND)
        logger.info("recipe updated", recipe_id=recipe_id, actor_id=actor_id)
        return updated

    async def delete_recipe(self, recipe_id: int, actor_id: str) -> None:
        await self.get_owned_recipe(recipe_id, actor_id, action="delete")

        if not await self._recipe_repo.delete_recipe(recipe_id):
            raise NotFoundError(RECIPE_NOT_FOUND)
        logger.info("recipe deleted", recipe_id=recipe_id, actor_id=actor_id)
