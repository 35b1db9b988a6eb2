"""Request body helpers shared by the JSON handlers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from shared.errors import ValidationError

if TYPE_CHECKING:
    from starlette.requests import Request


async def parse_json_body(request: Request) -> dict:
    """Parse a JSON object body. Raise ValidationError on anything else."""
    try:
        body = await request.json()
    except ValueError as e:
        raise ValidationError("Invalid JSON body") from e
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


def optional_str(body: dict, key: str) -> str:
    """Return body[key] as a string, "" when absent or null."""
    value = body.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValidationError(f"{key} must be a string")
    try:
        value.encode("utf-8")
    except UnicodeEncodeError as e:
        # Lone surrogates survive JSON decoding but not UTF-8 encoding.
        raise ValidationError(f"{key} must be valid UTF-8 text") from e
    return value
