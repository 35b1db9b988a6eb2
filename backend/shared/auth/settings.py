"""Auth and storage settings, loaded once at startup."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings

from shared.auth.password import DEFAULT_BCRYPT_ROUNDS
from shared.auth.tokens import TOKEN_TTL_SECONDS


class AuthSettings(BaseSettings):
    model_config = {"env_prefix": "AUTH_", "frozen": True}

    # HMAC secret for bearer tokens -- required, no default.
    # The application fails to start if AUTH_TOKEN_SECRET is not set.
    token_secret: str = Field(min_length=1)

    token_ttl_seconds: int = Field(default=TOKEN_TTL_SECONDS, gt=0, le=TOKEN_TTL_SECONDS * 30)

    # SQLite database file path
    database_path: str = "backend/storage.db"

    # "simple" is for tests only
    password_hasher: Literal["bcrypt", "simple"] = "bcrypt"
    bcrypt_rounds: int = Field(default=DEFAULT_BCRYPT_ROUNDS, ge=4, le=31)
