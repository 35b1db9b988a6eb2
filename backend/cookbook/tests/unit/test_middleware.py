"""Tests for API server middleware."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pytest
import structlog
from starlette.applications import Starlette
from starlette.responses import JSONResponse
from starlette.routing import Route, WebSocketRoute
from starlette.testclient import TestClient

from cookbook.server.middleware import (
    SECURITY_HEADERS,
    RequestLogMiddleware,
    SecurityHeadersMiddleware,
    SlashNormalizationMiddleware,
)

if TYPE_CHECKING:
    from starlette.requests import Request
    from starlette.websockets import WebSocket


async def _echo_path(request: Request) -> JSONResponse:
    return JSONResponse({"path": request.url.path})


async def _echo_context(_request: Request) -> JSONResponse:
    return JSONResponse(structlog.contextvars.get_contextvars())


async def _boom(_request: Request) -> JSONResponse:
    raise RuntimeError("boom")


async def _ws_echo(websocket: WebSocket) -> None:
    await websocket.accept()
    data = await websocket.receive_text()
    await websocket.send_text(data)
    await websocket.close()


def _make_slash_app() -> Starlette:
    app = Starlette(routes=[Route("/items", _echo_path, methods=["GET"])])
    app.add_middleware(SlashNormalizationMiddleware)
    return app


def _make_security_headers_app() -> Starlette:
    app = Starlette(
        routes=[
            Route("/items", _echo_path, methods=["GET"]),
            WebSocketRoute("/ws", _ws_echo),
        ],
    )
    app.add_middleware(SecurityHeadersMiddleware)
    return app


def _make_request_log_app() -> Starlette:
    app = Starlette(
        routes=[
            Route("/context", _echo_context, methods=["GET"]),
            Route("/boom", _boom, methods=["GET"]),
            WebSocketRoute("/ws", _ws_echo),
        ],
    )
    app.add_middleware(RequestLogMiddleware)
    return app


@pytest.fixture
def slash_client() -> TestClient:
    return TestClient(_make_slash_app())


@pytest.fixture
def security_client() -> TestClient:
    return TestClient(_make_security_headers_app())


@pytest.fixture
def log_client() -> TestClient:
    return TestClient(_make_request_log_app(), raise_server_exceptions=False)


class TestSlashNormalizationMiddleware:
    def test_trailing_slash_stripped(self, slash_client: TestClient) -> None:
        response = slash_client.get("/items/")
        assert response.status_code == 200
        assert response.json() == {"path": "/items"}

    def test_no_trailing_slash_unchanged(self, slash_client: TestClient) -> None:
        response = slash_client.get("/items")
        assert response.json() == {"path": "/items"}

    def test_root_path_preserved(self, slash_client: TestClient) -> None:
        """The root path ``/`` must not be stripped to an empty string."""
        response = slash_client.get("/")
        assert response.status_code == 404


class TestSecurityHeadersMiddleware:
    def test_headers_present_on_success(self, security_client: TestClient) -> None:
        response = security_client.get("/items")
        assert response.status_code == 200
        for name, value in SECURITY_HEADERS:
            assert response.headers[name.decode()] == value.decode()

    def test_headers_present_on_404(self, security_client: TestClient) -> None:
        response = security_client.get("/nonexistent")
        assert response.status_code == 404
        for name, value in SECURITY_HEADERS:
            assert response.headers[name.decode()] == value.decode()

    def test_csp_forbids_everything(self, security_client: TestClient) -> None:
        csp = security_client.get("/items").headers["content-security-policy"]
        assert "default-src 'none'" in csp
        assert "frame-ancestors 'none'" in csp

    def test_websocket_passthrough(self, security_client: TestClient) -> None:
        with security_client.websocket_connect("/ws") as ws:
            ws.send_text("hello")
            assert ws.receive_text() == "hello"


class TestRequestLogMiddleware:
    def test_binds_request_context(self, log_client: TestClient) -> None:
        response = log_client.get("/context", headers={"X-Request-ID": "req-1"})

        assert response.json() == {"request_id": "req-1", "method": "GET", "path": "/context"}
        assert response.headers["x-request-id"] == "req-1"

    def test_generates_id_when_absent(self, log_client: TestClient) -> None:
        response = log_client.get("/context")

        request_id = response.headers["x-request-id"]
        assert len(request_id) == 32
        assert response.json()["request_id"] == request_id

    @pytest.mark.parametrize("bad_id", ["has space", "x" * 65, "semi;colon"])
    def test_rejects_unsafe_incoming_id(self, log_client: TestClient, bad_id: str) -> None:
        response = log_client.get("/context", headers={"X-Request-ID": bad_id})

        assert response.headers["x-request-id"] != bad_id

    def test_logs_completion_with_status(self, log_client: TestClient, caplog) -> None:
        with caplog.at_level(logging.INFO):
            log_client.get("/context")

        assert "request completed" in caplog.text
        assert "'status': 200" in caplog.text

    def test_logs_completion_on_unhandled_error(self, log_client: TestClient, caplog) -> None:
        with caplog.at_level(logging.INFO):
            response = log_client.get("/boom")

        assert response.status_code == 500
        assert "request completed" in caplog.text
        assert "'status': 500" in caplog.text

    def test_context_cleared_after_request(self, log_client: TestClient) -> None:
        log_client.get("/context")
        assert "request_id" not in structlog.contextvars.get_contextvars()

    def test_websocket_passthrough(self, log_client: TestClient) -> None:
        with log_client.websocket_connect("/ws") as ws:
            ws.send_text("hello")
            assert ws.receive_text() == "hello"
