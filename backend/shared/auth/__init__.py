"""Credential hashing, bearer tokens, and ownership checks for the cookbook API."""

from shared.auth.models import TokenClaims, User
from shared.auth.ownership import ensure_owner, is_owner
from shared.auth.password import BcryptHasher, PasswordHasher, SimpleHasher, get_hasher
from shared.auth.service import AuthService
from shared.auth.settings import AuthSettings
from shared.auth.tokens import TOKEN_TTL_SECONDS, issue_token, sign_token, verify_token

__all__ = [
    "TOKEN_TTL_SECONDS",
    "AuthService",
    "AuthSettings",
    "BcryptHasher",
    "PasswordHasher",
    "SimpleHasher",
    "TokenClaims",
    "User",
    "ensure_owner",
    "get_hasher",
    "is_owner",
    "issue_token",
    "sign_token",
    "verify_token",
]
