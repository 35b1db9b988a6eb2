"""Auth endpoints: register, login, and current user."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from cookbook.views.parsing import optional_str, parse_json_body
from shared.errors import ValidationError

if TYPE_CHECKING:
    from starlette.requests import Request

    from shared.auth.service import AuthService

_WHITESPACE = re.compile(r"\s+")


def derive_username(first_name: str, last_name: str) -> str:
    """Build a username from a display name, e.g. "Ada", "Love lace" -> "Ada_Love_lace"."""
    parts = [part.strip() for part in (first_name, last_name) if part.strip()]
    return _WHITESPACE.sub("_", "_".join(parts))


async def register(request: Request) -> JSONResponse:
    """POST /auth/register - create an account and return it with a bearer token."""
    auth_service: AuthService = request.app.state.auth_service
    body = await parse_json_body(request)

    username = optional_str(body, "username")
    if not username.strip():
        username = derive_username(optional_str(body, "firstName"), optional_str(body, "lastName"))

    user, token = await auth_service.register(
        username,
        optional_str(body, "email"),
        optional_str(body, "password"),
    )
    return JSONResponse(
        {
            "success": True,
            "message": "User registered successfully",
            "user": user.public(),
            "token": token,
        },
        status_code=201,
    )


async def login(request: Request) -> JSONResponse:
    """POST /auth/login - exchange a username or email and password for a bearer token."""
    auth_service: AuthService = request.app.state.auth_service
    body = await parse_json_body(request)

    identifier = optional_str(body, "username").strip() or optional_str(body, "email").strip()
    password = optional_str(body, "password")
    if not identifier or not password:
        raise ValidationError("Username and password are required")

    user, token = await auth_service.login(identifier, password)
    return JSONResponse(
        {
            "success": True,
            "message": "Login successful",
            "user": user.public(),
            "token": token,
        },
    )


async def current_user(request: Request) -> JSONResponse:
    """GET /api/user - the account behind the bearer token."""
    return JSONResponse({"success": True, "user": request.user.account.public()})
