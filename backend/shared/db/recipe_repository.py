"""SQLite-backed recipe repository."""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import UTC, datetime
from typing import TYPE_CHECKING

import structlog

from shared.dal.models import MAX_STORED_INT, Recipe
from shared.dal.recipe_repository import RecipeRepository
from shared.errors import StoreError

if TYPE_CHECKING:
    from shared.dal.models import RecipeDraft
    from shared.db.connection import Database

logger = structlog.get_logger()

_SELECT_RECIPE = (
    "SELECT r.id, r.user_id, r.title, r.ingredients, r.instructions, "
    "r.prep_time, r.cook_time, r.servings, r.created_at, u.username AS author "
    "FROM recipes r LEFT JOIN users u ON r.user_id = u.id"
)

# Newest first; id breaks ties between rows created within the same instant.
_NEWEST_FIRST = "ORDER BY r.created_at DESC, r.id DESC"


def _is_storable_id(recipe_id: int) -> bool:
    return 0 <= recipe_id <= MAX_STORED_INT


def _row_to_recipe(row: sqlite3.Row) -> Recipe:
    return Recipe(
        recipe_id=row["id"],
        owner_id=row["user_id"],
        title=row["title"],
        ingredients=row["ingredients"],
        instructions=row["instructions"],
        prep_time=row["prep_time"],
        cook_time=row["cook_time"],
        servings=row["servings"],
        created_at=datetime.fromisoformat(row["created_at"]),
        author=row["author"],
    )


class SqliteRecipeRepository(RecipeRepository):
    """SQLite implementation of RecipeRepository.

    Writes are serialised under an asyncio lock and run inside a transaction,
    so a failed statement never leaves the shared connection mid-transaction.
    Reads resolve the author's username with a LEFT JOIN so anonymous recipes
    are returned with author None.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_recipe(self, draft: RecipeDraft, owner_id: str | None = None) -> Recipe:
        """Insert a recipe and return it as stored."""
        created_at = datetime.now(UTC).isoformat()
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    cursor = conn.execute(
                        "INSERT INTO recipes "
                        "(user_id, title, ingredients, instructions, prep_time, cook_time, servings, created_at) "
                        "VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                        (
                            owner_id,
                            draft.title,
                            draft.ingredients,
                            draft.instructions,
                            draft.prep_time,
                            draft.cook_time,
                            draft.servings,
                            created_at,
                        ),
                    )
                    recipe_id = cursor.lastrowid
            except sqlite3.Error as exc:
                logger.exception("failed to insert recipe", owner_id=owner_id)
                raise StoreError("Failed to create recipe") from exc

        recipe = await self.get_recipe(recipe_id)
        if recipe is None:  # pragma: no cover
            raise StoreError("Failed to create recipe")
        return recipe

    async def get_recipe(self, recipe_id: int) -> Recipe | None:
        """Retrieve a single recipe by its id."""
        if not _is_storable_id(recipe_id):
            return None
        rows = self._fetch_all(f"{_SELECT_RECIPE} WHERE r.id = ?", (recipe_id,))
        return rows[0] if rows else None

    async def list_recipes(self, owner_id: str | None = None) -> list[Recipe]:
        """Retrieve all recipes, or only those owned by owner_id, newest first."""
        if owner_id is None:
            return self._fetch_all(f"{_SELECT_RECIPE} {_NEWEST_FIRST}", ())
        return self._fetch_all(f"{_SELECT_RECIPE} WHERE r.user_id = ? {_NEWEST_FIRST}", (owner_id,))

    async def update_recipe(self, recipe_id: int, draft: RecipeDraft) -> Recipe | None:
        """Replace the editable fields of a recipe. Returns None if it does not exist.

        Owner and creation timestamp are never changed.
        """
        if not _is_storable_id(recipe_id):
            return None
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    cursor = conn.execute(
                        "UPDATE recipes SET title = ?, ingredients = ?, instructions = ?, "
                        "prep_time = ?, cook_time = ?, servings = ? WHERE id = ?",
                        (
                            draft.title,
                            draft.ingredients,
                            draft.instructions,
                            draft.prep_time,
                            draft.cook_time,
                            draft.servings,
                            recipe_id,
                        ),
                    )
            except sqlite3.Error as exc:
                logger.exception("failed to update recipe", recipe_id=recipe_id)
                raise StoreError("Failed to update recipe") from exc

        if cursor.rowcount == 0:
            return None
        return await self.get_recipe(recipe_id)

    async def delete_recipe(self, recipe_id: int) -> bool:
        """Remove a recipe by id. Returns True if a row was deleted."""
        if not _is_storable_id(recipe_id):
            return False
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    cursor = conn.execute("DELETE FROM recipes WHERE id = ?", (recipe_id,))
            except sqlite3.Error as exc:
                logger.exception("failed to delete recipe", recipe_id=recipe_id)
                raise StoreError("Failed to delete recipe") from exc
        return cursor.rowcount > 0

    def _fetch_all(self, query: str, params: tuple) -> list[Recipe]:
        try:
            rows = self._db.connection.execute(query, params).fetchall()
        except sqlite3.Error as exc:
            logger.exception("failed to read recipes")
            raise StoreError("Failed to fetch recipes") from exc
        return [_row_to_recipe(row) for row in rows]
