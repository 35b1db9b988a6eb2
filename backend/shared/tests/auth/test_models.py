"""Tests for User model validation and public projection."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from shared.auth.models import User

CREATED_AT = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)


def _user(**overrides) -> User:
    fields = {
        "user_id": "u1",
        "username": "alice",
        "email": "alice@example.com",
        "password_hash": "$2b$10$fakehash",
        "created_at": CREATED_AT,
    }
    fields.update(overrides)
    return User(**fields)


class TestUserValidation:
    def test_empty_password_hash_rejected(self):
        with pytest.raises(ValidationError, match="password_hash"):
            _user(password_hash="")

    def test_empty_username_rejected(self):
        with pytest.raises(ValidationError, match="username"):
            _user(username="")

    def test_overlong_username_rejected(self):
        with pytest.raises(ValidationError, match="username"):
            _user(username="a" * 51)

    def test_overlong_email_rejected(self):
        with pytest.raises(ValidationError, match="email"):
            _user(email="a" * 90 + "@example.com")

    def test_user_is_frozen(self):
        user = _user()
        with pytest.raises(ValidationError):
            user.username = "mallory"


class TestUserPublic:
    def test_public_projection_fields(self):
        assert _user().public() == {
            "id": "u1",
            "username": "alice",
            "email": "alice@example.com",
            "created_at": CREATED_AT.isoformat(),
        }

    def test_public_projection_omits_password_hash(self):
        public = _user().public()
        assert "password_hash" not in public
        assert "$2b$10$fakehash" not in public.values()
