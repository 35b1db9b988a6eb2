"""Shared test helpers for cookbook integration tests."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from starlette.testclient import TestClient

PASSWORD = "secret1"


def register(client: TestClient, username: str = "alice") -> dict:
    """Register a user and return the response body (user and token)."""
    response = client.post(
        "/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": PASSWORD},
    )
    assert response.status_code == 201, response.text
    return response.json()


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def recipe_payload(title: str = "Pancakes", **overrides) -> dict:
    payload = {
        "title": title,
        "ingredients": "flour\nmilk\neggs",
        "instructions": "Mix and fry.",
        "prep_time": 10,
        "cook_time": 15,
        "servings": 4,
    }
    payload.update(overrides)
    return payload
