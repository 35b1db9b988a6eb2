"""SQLite database layer: connection management and repository implementations."""

from shared.db.connection import Database
from shared.db.recipe_repository import SqliteRecipeRepository
from shared.db.user_repository import SqliteUserRepository

__all__ = [
    "Database",
    "SqliteRecipeRepository",
    "SqliteUserRepository",
]
