"""Shared fixtures for cookbook tests."""

import os

import pytest
from starlette.testclient import TestClient

from cookbook.server.app import create_app
from cookbook.server.settings import ApiServerSettings
from shared.auth.settings import AuthSettings

# AuthSettings requires AUTH_TOKEN_SECRET. Set a test default
# before any AuthSettings is instantiated.
os.environ.setdefault("AUTH_TOKEN_SECRET", "test-token-signing-value")

TEST_SECRET = "test-token-signing-value"
ALLOWED_ORIGIN = "http://localhost:3000"


@pytest.fixture
def auth_settings(tmp_path) -> AuthSettings:
    return AuthSettings(
        token_secret=TEST_SECRET,
        database_path=str(tmp_path / "test.db"),
        password_hasher="simple",
    )


@pytest.fixture
def client(auth_settings):
    app = create_app(
        settings=ApiServerSettings(cors_origins=[ALLOWED_ORIGIN]),
        auth_settings=auth_settings,
    )
    with TestClient(app) as test_client:
        yield test_client
