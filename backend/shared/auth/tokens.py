"""HMAC-SHA256 signed bearer tokens for stateless session identification.

Tokens are issued at registration and login, and verified locally on every
request using the process-wide secret. Nothing is stored server-side:
rotating the secret invalidates every outstanding token.

Token format: base64url(json_payload_bytes).base64url(hmac_sha256_signature)
"""

import base64
import binascii
import hashlib
import hmac
import json
import math
import time
from dataclasses import asdict

import structlog

from shared.auth.models import TokenClaims

logger = structlog.get_logger()

_TOKEN_PARTS = 2  # base64url(payload).base64url(signature)

TOKEN_TTL_SECONDS = 86400  # 24 hours
CLOCK_SKEW_SECONDS = 60


def issue_token(
    user_id: str,
    username: str,
    secret: str,
    ttl_seconds: int = TOKEN_TTL_SECONDS,
) -> str:
    """Create and sign session claims, returning the bearer token string."""
    now = time.time()
    claims = TokenClaims(
        user_id=user_id,
        username=username,
        issued_at=now,
        expires_at=now + ttl_seconds,
    )
    return sign_token(claims, secret)


def sign_token(claims: TokenClaims, secret: str) -> str:
    """Serialize claims to JSON, compute HMAC-SHA256, return base64url(payload).base64url(sig)."""
    payload_bytes = json.dumps(asdict(claims), sort_keys=True).encode()
    sig = hmac.new(secret.encode(), payload_bytes, hashlib.sha256).digest()
    payload_b64 = base64.urlsafe_b64encode(payload_bytes).decode()
    sig_b64 = base64.urlsafe_b64encode(sig).decode()
    return f"{payload_b64}.{sig_b64}"


def verify_token(
    token: str,
    secret: str,
    *,
    max_ttl_seconds: int = TOKEN_TTL_SECONDS,
    now: float | None = None,
) -> TokenClaims | None:
    """Verify HMAC signature and expiry. Returns TokenClaims or None on any failure.

    Malformed tokens, bad signatures, and expired tokens are indistinguishable
    to the caller.
    """
    parts = token.split(".")
    if len(parts) != _TOKEN_PARTS:
        return None

    try:
        payload_bytes = base64.urlsafe_b64decode(parts[0])
        provided_sig = base64.urlsafe_b64decode(parts[1])
    except (ValueError, binascii.Error):
        return None

    expected_sig = hmac.new(secret.encode(), payload_bytes, hashlib.sha256).digest()
    if not hmac.compare_digest(provided_sig, expected_sig):
        logger.debug("token signature mismatch")
        return None

    try:
        data = json.loads(payload_bytes)
        claims = TokenClaims(**data)
    except (ValueError, TypeError, KeyError):
        logger.debug("token malformed payload")
        return None

    if not isinstance(claims.user_id, str) or not isinstance(claims.username, str):
        logger.debug("token malformed identity claims")
        return None

    current = time.time() if now is None else now
    if not _validate_token_timestamps(claims, current, max_ttl_seconds):
        return None

    return claims


def _is_finite_number(value: object) -> bool:
    """Check that a value is a finite int or float (excluding bool)."""
    if isinstance(value, bool):
        return False
    if not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _validate_token_timestamps(claims: TokenClaims, now: float, max_ttl_seconds: int) -> bool:
    """Validate temporal claims on a token.

    Checks: both timestamps are finite numbers, issued_at is not in the future
    (with clock skew tolerance), expires_at is after issued_at, the token
    lifetime does not exceed the allowed TTL, and the token has not expired.
    """
    if not _is_finite_number(claims.issued_at) or not _is_finite_number(claims.expires_at):
        logger.debug("token non-finite timestamp")
        return False

    if claims.issued_at > now + CLOCK_SKEW_SECONDS:
        logger.debug("token issued in the future")
        return False

    if claims.expires_at <= claims.issued_at:
        logger.debug("token expires_at <= issued_at")
        return False

    lifetime = claims.expires_at - claims.issued_at
    if lifetime > max_ttl_seconds + CLOCK_SKEW_SECONDS:
        logger.debug("token lifetime too long")
        return False

    if now >= claims.expires_at:
        logger.debug("token expired")
        return False

    return True
