"""SQLite-backed user repository."""

from __future__ import annotations

import asyncio
import sqlite3
from datetime import datetime
from typing import TYPE_CHECKING

import structlog

from shared.auth.models import User
from shared.dal.user_repository import UserRepository
from shared.errors import StoreError

if TYPE_CHECKING:
    from shared.db.connection import Database

logger = structlog.get_logger()

_SELECT_USER = "SELECT id, username, email, password_hash, created_at FROM users"


def _row_to_user(row: sqlite3.Row) -> User:
    return User(
        user_id=row["id"],
        username=row["username"],
        email=row["email"],
        password_hash=row["password_hash"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class SqliteUserRepository(UserRepository):
    """SQLite implementation of UserRepository.

    Uses a single INSERT under an asyncio lock to avoid race windows
    between existence checks and inserts. Relies on database uniqueness
    constraints and maps IntegrityError to domain ValueError.
    """

    def __init__(self, db: Database) -> None:
        self._db = db
        self._lock = asyncio.Lock()

    async def create_user(self, user: User) -> None:
        """Insert a user. Raises ValueError on duplicate id, username, or email."""
        async with self._lock:
            try:
                with self._db.transaction() as conn:
                    conn.execute(
                        "INSERT INTO users (id, username, email, password_hash, created_at) VALUES (?, ?, ?, ?, ?)",
                        (
                            user.user_id,
                            user.username,
                            user.email,
                            user.password_hash,
                            user.created_at.isoformat(),
                        ),
                    )
            except sqlite3.IntegrityError as exc:
                error_msg = str(exc).lower()
                if "users.id" in error_msg:
                    raise ValueError(f"User with id '{user.user_id}' already exists") from exc
                if "users.username" in error_msg or "idx_users_username" in error_msg:
                    raise ValueError(f"Username '{user.username}' already taken") from exc
                if "users.email" in error_msg or "idx_users_email" in error_msg:
                    raise ValueError("Email already registered") from exc
                raise ValueError(str(exc)) from exc  # pragma: no cover
            except sqlite3.Error as exc:
                logger.exception("failed to insert user", user_id=user.user_id)
                raise StoreError("Failed to register user") from exc

    async def get_by_id(self, user_id: str) -> User | None:
        return self._fetch_one(f"{_SELECT_USER} WHERE id = ?", (user_id,))

    async def get_by_username(self, username: str) -> User | None:
        """Look up a user by username (case-insensitive)."""
        return self._fetch_one(f"{_SELECT_USER} WHERE username = ? COLLATE NOCASE", (username,))

    async def get_by_email(self, email: str) -> User | None:
        """Look up a user by email (case-insensitive)."""
        return self._fetch_one(f"{_SELECT_USER} WHERE email = ? COLLATE NOCASE", (email,))

    def _fetch_one(self, query: str, params: tuple) -> User | None:
        try:
            row = self._db.connection.execute(query, params).fetchone()
        except sqlite3.Error as exc:
            logger.exception("failed to read user")
            raise StoreError("Failed to read user") from exc
        if row is None:
            return None
        return _row_to_user(row)
