"""Auth service coordinating registration, login, and bearer token validation."""

from __future__ import annotations

import re
from datetime import UTC, datetime
from typing import TYPE_CHECKING
from uuid import uuid4

import structlog

from shared.auth.models import User
from shared.auth.tokens import TOKEN_TTL_SECONDS, issue_token, verify_token
from shared.errors import AuthenticationError, ValidationError

if TYPE_CHECKING:
    from shared.auth.models import TokenClaims
    from shared.auth.password import PasswordHasher
    from shared.dal.user_repository import UserRepository

logger = structlog.get_logger()

USERNAME_MAX_LENGTH = 50
USERNAME_PATTERN = re.compile(r"^[\w.\-]+$")

EMAIL_MAX_LENGTH = 100
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+$")

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_BYTES = 72  # bcrypt truncates at 72 bytes

INVALID_CREDENTIALS = "Invalid credentials"
INVALID_TOKEN = "Invalid or expired token"

_DUMMY_PASSWORD = "timing-equaliser"  # noqa: S105 - hashed once, never stored


class AuthService:
    """Coordinate user registration, login, and session token validation."""

    def __init__(
        self,
        user_repo: UserRepository,
        *,
        password_hasher: PasswordHasher,
        token_secret: str,
        token_ttl_seconds: int = TOKEN_TTL_SECONDS,
    ) -> None:
        self._user_repo = user_repo
        self._hasher = password_hasher
        self._token_secret = token_secret
        self._token_ttl_seconds = token_ttl_seconds
        self._dummy_hash: str | None = None

    async def register(self, username: str, email: str, password: str) -> tuple[User, str]:
        """Register a new account and return (user, bearer token)."""
        username = username.strip()
        email = email.strip()
        _validate_username(username)
        _validate_email(email)
        _validate_password(password)
        await self._ensure_available(username, email)

        user = User(
            user_id=str(uuid4()),
            username=username,
            email=email,
            password_hash=await self._hasher.hash(password),
            created_at=datetime.now(UTC),
        )
        try:
            await self._user_repo.create_user(user)
        except ValueError as e:
            # Lost a race with a concurrent registration for the same name or email.
            raise ValidationError("Username or email already exists") from e

        logger.info("user registered", user_id=user.user_id, username=user.username)
        return user, self.issue_token(user)

    async def login(self, identifier: str, password: str) -> tuple[User, str]:
        """Validate credentials and return (user, bearer token).

        identifier is a username, or an email address when it contains "@".
        Unknown accounts and wrong passwords raise the same AuthenticationError,
        and both paths pay for one hash verification.
        """
        identifier = identifier.strip()
        if "@" in identifier:
            user = await self._user_repo.get_by_email(identifier)
        else:
            user = await self._user_repo.get_by_username(identifier)

        if user is None:
            await self._hasher.verify(password, await self._get_dummy_hash())
            logger.info("login rejected")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not await self._hasher.verify(password, user.password_hash):
            logger.info("login rejected")
            raise AuthenticationError(INVALID_CREDENTIALS)

        logger.info("user logged in", user_id=user.user_id)
        return user, self.issue_token(user)

    def issue_token(self, user: User) -> str:
        """Sign a fresh bearer token for the user."""
        return issue_token(user.user_id, user.username, self._token_secret, self._token_ttl_seconds)

    def authenticate(self, token: str) -> TokenClaims:
        """Return the claims of a valid bearer token, or raise AuthenticationError."""
        claims = verify_token(token, self._token_secret, max_ttl_seconds=self._token_ttl_seconds)
        if claims is None:
            raise AuthenticationError(INVALID_TOKEN)
        return claims

    async def current_user(self, user_id: str) -> User:
        """Load the account behind an authenticated session."""
        user = await self._user_repo.get_by_id(user_id)
        if user is None:
            # Signed for an account that no longer exists.
            raise AuthenticationError(INVALID_TOKEN)
        return user

    # -- private helpers --

    async def _get_dummy_hash(self) -> str:
        if self._dummy_hash is None:
            self._dummy_hash = await self._hasher.hash(_DUMMY_PASSWORD)
        return self._dummy_hash

    async def _ensure_available(self, username: str, email: str) -> None:
        """Raise ValidationError if the username or email is already registered."""
        if await self._user_repo.get_by_username(username) is not None:
            raise ValidationError("Username or email already exists")
        if await self._user_repo.get_by_email(email) is not None:
            raise ValidationError("Username or email already exists")


def _validate_username(username: str) -> None:
    """Validate username: 1-50 chars, letters, digits, underscores, dots, and hyphens."""
    if not username:
        raise ValidationError("Username is required")
    if len(username) > USERNAME_MAX_LENGTH:
        raise ValidationError(f"Username must be at most {USERNAME_MAX_LENGTH} characters")
    if not USERNAME_PATTERN.match(username):
        raise ValidationError("Username must contain only letters, numbers, underscores, dots, and hyphens")


def _validate_email(email: str) -> None:
    if not email:
        raise ValidationError("Email is required")
    if len(email) > EMAIL_MAX_LENGTH:
        raise ValidationError(f"Email must be at most {EMAIL_MAX_LENGTH} characters")
    if not EMAIL_PATTERN.match(email):
        raise ValidationError("Email address is not valid")


def _validate_password(password: str) -> None:
    """Validate password: at least 6 chars, at most 72 UTF-8 bytes (bcrypt limit)."""
    if not password:
        raise ValidationError("Password is required")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    try:
        encoded = password.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ValidationError("Password must be valid UTF-8 text") from e
    if len(encoded) > PASSWORD_MAX_BYTES:
        raise ValidationError(f"Password must not exceed {PASSWORD_MAX_BYTES} bytes when encoded")
