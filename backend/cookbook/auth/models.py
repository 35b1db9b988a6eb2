"""User model for Starlette AuthenticationMiddleware integration."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.authentication import BaseUser

if TYPE_CHECKING:
    from shared.auth.models import User


class AuthenticatedUser(BaseUser):
    """Authenticated user for Starlette's request.user.

    Created by the auth backend from a verified bearer token.
    """

    def __init__(self, user: User) -> None:
        self._user = user

    @property
    def is_authenticated(self) -> bool:
        return True

    @property
    def display_name(self) -> str:
        return self._user.username

    @property
    def identity(self) -> str:
        return self._user.user_id

    @property
    def username(self) -> str:
        return self._user.username

    @property
    def user_id(self) -> str:
        return self._user.user_id

    @property
    def account(self) -> User:
        return self._user
