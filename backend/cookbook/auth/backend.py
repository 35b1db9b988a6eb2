"""Starlette AuthenticationBackend that validates bearer tokens."""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from starlette.authentication import AuthCredentials, AuthenticationBackend, AuthenticationError
from starlette.responses import JSONResponse

from cookbook.auth.models import AuthenticatedUser
from shared.auth.service import INVALID_TOKEN
from shared.errors import AuthenticationError as TokenRejectedError

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from shared.auth.service import AuthService

logger = structlog.get_logger()

BEARER_SCHEME = "bearer"


def parse_bearer(header: str) -> str | None:
    """Return the token from an ``Authorization: Bearer <token>`` value, or None if malformed."""
    scheme, _, token = header.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token or " " in token:
        return None
    return token


class BearerTokenBackend(AuthenticationBackend):
    """Authenticate requests via the ``Authorization: Bearer <token>`` header.

    A missing header leaves the request anonymous. A header that is present
    but malformed, badly signed, expired, or names a deleted account raises
    AuthenticationError, which the middleware turns into a 401 on any route.
    """

    def __init__(self, auth_service: AuthService) -> None:
        self._auth_service = auth_service

    async def authenticate(
        self,
        conn: HTTPConnection,
    ) -> tuple[AuthCredentials, AuthenticatedUser] | None:
        header = conn.headers.get("authorization")
        if header is None:
            return None

        token = parse_bearer(header)
        if token is None:
            logger.info("malformed authorization header")
            raise AuthenticationError(INVALID_TOKEN)

        try:
            claims = self._auth_service.authenticate(token)
            user = await self._auth_service.current_user(claims.user_id)
        except TokenRejectedError as e:
            logger.info("bearer token rejected")
            raise AuthenticationError(e.message) from e

        structlog.contextvars.bind_contextvars(user_id=user.user_id)
        return AuthCredentials(["authenticated"]), AuthenticatedUser(user)


def on_auth_error(_conn: HTTPConnection, exc: Exception) -> JSONResponse:
    """Render a rejected bearer token as a 401 JSON error."""
    return JSONResponse(
        {"error": str(exc) or INVALID_TOKEN},
        status_code=401,
        headers={"WWW-Authenticate": "Bearer"},
    )
