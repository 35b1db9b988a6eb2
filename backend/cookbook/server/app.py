from __future__ import annotations

import contextlib
from http import HTTPStatus
from typing import TYPE_CHECKING, cast

import structlog
from starlette.applications import Starlette
from starlette.exceptions import HTTPException
from starlette.middleware.authentication import AuthenticationMiddleware
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from cookbook.auth.backend import BearerTokenBackend, on_auth_error
from cookbook.auth.policy import optional_auth, protected_api, public_route, validate_route_auth_policy
from cookbook.recipes.service import RecipeService
from cookbook.server.middleware import RequestLogMiddleware, SecurityHeadersMiddleware, SlashNormalizationMiddleware
from cookbook.server.settings import ApiServerSettings
from cookbook.views.auth_handlers import current_user, login, register
from cookbook.views.recipe_handlers import (
    create_recipe,
    delete_recipe,
    get_recipe,
    health,
    list_recipes,
    my_recipes,
    root,
    update_recipe,
)
from shared.auth import AuthService
from shared.auth.password import get_hasher
from shared.auth.settings import AuthSettings
from shared.db import Database, SqliteRecipeRepository, SqliteUserRepository
from shared.errors import CookbookError
from shared.logging import setup_logging

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from starlette.requests import Request

ACCESS_TOKEN_REQUIRED = "Access token required"
_PLACEHOLDER_SECRET_MARKERS = ("change", "secret-key")


async def _cookbook_error_handler(_request: Request, exc: Exception) -> Response:
    """Render a domain error as ``{"error": message}`` with its status."""
    err = cast("CookbookError", exc)
    if err.status_code >= HTTPStatus.INTERNAL_SERVER_ERROR:
        logger.error("request failed", error=err.message)
    return JSONResponse({"error": err.message}, status_code=err.status_code)


async def _http_error_handler(_request: Request, exc: Exception) -> Response:
    """Render Starlette HTTP errors (unknown route, bad method, missing token) as JSON."""
    http_exc = cast("HTTPException", exc)
    if http_exc.status_code in {HTTPStatus.NO_CONTENT, HTTPStatus.NOT_MODIFIED}:
        return Response(status_code=http_exc.status_code, headers=http_exc.headers)
    if http_exc.status_code == HTTPStatus.UNAUTHORIZED:
        return JSONResponse(
            {"error": ACCESS_TOKEN_REQUIRED},
            status_code=HTTPStatus.UNAUTHORIZED,
            headers={"WWW-Authenticate": "Bearer"},
        )
    return JSONResponse({"error": http_exc.detail}, status_code=http_exc.status_code, headers=http_exc.headers)


async def _unhandled_error_handler(_request: Request, exc: Exception) -> Response:
    logger.error("unhandled error", exc_info=exc)
    return JSONResponse({"error": "Internal server error"}, status_code=HTTPStatus.INTERNAL_SERVER_ERROR)


def _warn_on_placeholder_secret(secret: str) -> None:
    lowered = secret.lower()
    if any(marker in lowered for marker in _PLACEHOLDER_SECRET_MARKERS):
        logger.warning("AUTH_TOKEN_SECRET looks like a placeholder; set a random value in production")


def create_app(
    settings: ApiServerSettings | None = None,
    auth_settings: AuthSettings | None = None,  # required in production (via get_app)
) -> Starlette:
    if settings is None:  # pragma: no cover
        settings = ApiServerSettings()
    if auth_settings is None:  # pragma: no cover
        auth_settings = AuthSettings()  # type: ignore[call-arg]

    routes = [
        # Public routes
        Route("/", public_route(root), methods=["GET"], name="root"),
        Route("/health", public_route(health), methods=["GET"], name="health"),
        Route("/auth/register", public_route(register), methods=["POST"], name="register"),
        Route("/auth/login", public_route(login), methods=["POST"], name="login"),
        Route("/recipes", public_route(list_recipes), methods=["GET"], name="list_recipes"),
        Route("/recipes/{recipe_id:int}", public_route(get_recipe), methods=["GET"], name="get_recipe"),
        # Owner bound when a bearer token is sent, anonymous otherwise
        Route("/recipes", optional_auth(create_recipe), methods=["POST"], name="create_recipe"),
        # Protected JSON routes (401 when unauthenticated)
        Route("/api/user", protected_api(current_user), methods=["GET"], name="current_user"),
        Route("/recipes/{recipe_id:int}", protected_api(update_recipe), methods=["PUT"], name="update_recipe"),
        Route("/recipes/{recipe_id:int}", protected_api(delete_recipe), methods=["DELETE"], name="delete_recipe"),
        Route("/my-recipes", protected_api(my_recipes), methods=["GET"], name="my_recipes"),
    ]
    validate_route_auth_policy(routes)

    _warn_on_placeholder_secret(auth_settings.token_secret)

    db = Database(auth_settings.database_path)
    db.connect()
    hasher = get_hasher(auth_settings.password_hasher, rounds=auth_settings.bcrypt_rounds)
    auth_service = AuthService(
        SqliteUserRepository(db),
        password_hasher=hasher,
        token_secret=auth_settings.token_secret,
        token_ttl_seconds=auth_settings.token_ttl_seconds,
    )
    recipe_service = RecipeService(SqliteRecipeRepository(db))

    @contextlib.asynccontextmanager
    async def lifespan(_app: Starlette) -> AsyncGenerator[None]:
        yield
        db.close()
        logger.info("database closed")

    app = Starlette(
        routes=routes,
        lifespan=lifespan,
        exception_handlers={
            CookbookError: _cookbook_error_handler,
            HTTPException: _http_error_handler,
            Exception: _unhandled_error_handler,
        },
    )
    app.add_middleware(SlashNormalizationMiddleware)  # type: ignore[arg-type]
    app.add_middleware(
        AuthenticationMiddleware,  # type: ignore[arg-type]
        backend=BearerTokenBackend(auth_service),
        on_error=on_auth_error,
    )
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )
    app.add_middleware(RequestLogMiddleware)  # type: ignore[arg-type]
    app.add_middleware(SecurityHeadersMiddleware)  # type: ignore[arg-type]

    app.state.db = db
    app.state.settings = settings
    app.state.auth_settings = auth_settings
    app.state.auth_service = auth_service
    app.state.recipe_service = recipe_service

    logger.info("cookbook api ready")
    return app


def get_app() -> Starlette:  # pragma: no cover
    """Factory function for uvicorn --factory cookbook.server.app:get_app."""
    s = ApiServerSettings()
    auth = AuthSettings()  # ty: ignore[missing-argument]
    setup_logging(log_dir=s.log_dir)
    return create_app(settings=s, auth_settings=auth)
