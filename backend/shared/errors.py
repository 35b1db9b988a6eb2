"""Error taxonomy shared by the domain services and the HTTP layer.

Each error carries the HTTP status the API responds with. Services raise
these; the server renders them once, in a single exception handler.
"""

from http import HTTPStatus


class CookbookError(Exception):
    """Base class for failures that terminate the current request."""

    status_code: int = HTTPStatus.INTERNAL_SERVER_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(CookbookError):
    """Missing or malformed input."""

    status_code = HTTPStatus.BAD_REQUEST


class AuthenticationError(CookbookError):
    """Bad credentials, or an invalid or expired bearer token."""

    status_code = HTTPStatus.UNAUTHORIZED


class AuthorizationError(CookbookError):
    """Valid identity without the rights for the requested operation."""

    status_code = HTTPStatus.FORBIDDEN


class NotFoundError(CookbookError):
    """Unknown resource id."""

    status_code = HTTPStatus.NOT_FOUND


class StoreError(CookbookError):
    """Underlying persistence failure."""

    status_code = HTTPStatus.INTERNAL_SERVER_ERROR
