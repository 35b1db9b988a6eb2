"""API authentication: Starlette backend, user model, and route policy."""

from cookbook.auth.backend import BearerTokenBackend, on_auth_error
from cookbook.auth.models import AuthenticatedUser
from cookbook.auth.policy import optional_auth, protected_api, public_route, validate_route_auth_policy

__all__ = [
    "AuthenticatedUser",
    "BearerTokenBackend",
    "on_auth_error",
    "optional_auth",
    "protected_api",
    "public_route",
    "validate_route_auth_policy",
]
