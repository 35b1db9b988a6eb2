"""User account and session claim models for authentication."""

from dataclasses import dataclass
from datetime import datetime

from pydantic import BaseModel, Field


class User(BaseModel, frozen=True):
    """User account stored in the user repository."""

    user_id: str
    username: str = Field(min_length=1, max_length=50)
    email: str = Field(min_length=3, max_length=100)
    password_hash: str = Field(min_length=1)  # bcrypt hash, never the raw password
    created_at: datetime

    def public(self) -> dict:
        """Return the JSON-safe projection exposed by the API (no password hash)."""
        return {
            "id": self.user_id,
            "username": self.username,
            "email": self.email,
            "created_at": self.created_at.isoformat(),
        }


@dataclass
class TokenClaims:
    """Payload carried inside a signed bearer token."""

    user_id: str
    username: str
    issued_at: float  # time.time()
    expires_at: float  # issued_at + TTL
