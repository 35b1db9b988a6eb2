"""Recipe endpoints plus the service banner and health check."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.responses import JSONResponse

from cookbook.views.parsing import parse_json_body
from shared.build_info import APP_VERSION, GIT_COMMIT

if TYPE_CHECKING:
    from starlette.requests import Request

    from cookbook.recipes.service import RecipeService
    from shared.dal.models import Recipe
    from shared.db import Database


def _recipe_list(recipes: list[Recipe]) -> JSONResponse:
    return JSONResponse({"success": True, "count": len(recipes), "recipes": [r.public() for r in recipes]})


async def root(_request: Request) -> JSONResponse:
    return JSONResponse({"message": "Cookbook API is running!"})


async def health(request: Request) -> JSONResponse:
    """GET /health - build info and database reachability; 503 when the store is down."""
    db: Database = request.app.state.db
    if db.ping():
        return JSONResponse({"status": "ok", "version": APP_VERSION, "commit": GIT_COMMIT, "database": "connected"})
    return JSONResponse(
        {"status": "degraded", "version": APP_VERSION, "commit": GIT_COMMIT, "database": "unavailable"},
        status_code=503,
    )


async def list_recipes(request: Request) -> JSONResponse:
    recipe_service: RecipeService = request.app.state.recipe_service
    return _recipe_list(await recipe_service.list_recipes())


async def my_recipes(request: Request) -> JSONResponse:
    recipe_service: RecipeService = request.app.state.recipe_service
    return _recipe_list(await recipe_service.list_for_owner(request.user.user_id))


async def get_recipe(request: Request) -> JSONResponse:
    recipe_service: RecipeService = request.app.state.recipe_service
    recipe = await recipe_service.get_recipe(request.path_params["recipe_id"])
    return JSONResponse({"success": True, "recipe": recipe.public()})


async def create_recipe(request: Request) -> JSONResponse:
    """POST /recipes - owned by the caller when a bearer token is sent, anonymous otherwise."""
    recipe_service: RecipeService = request.app.state.recipe_service
    body = await parse_json_body(request)
    owner_id = request.user.user_id if request.user.is_authenticated else None

    recipe = await recipe_service.create_recipe(body, owner_id=owner_id)
    return JSONResponse(
        {"success": True, "message": "Recipe created successfully", "recipe": recipe.public()},
        status_code=201,
    )


async def update_recipe(request: Request) -> JSONResponse:
    recipe_service: RecipeService = request.app.state.recipe_service
    recipe_id = request.path_params["recipe_id"]
    # Unknown or foreign recipes are rejected before the body is read.
    await recipe_service.get_owned_recipe(recipe_id, request.user.user_id, action="update")
    body = await parse_json_body(request)

    recipe = await recipe_service.update_recipe(recipe_id, body, request.user.user_id)
    return JSONResponse({"success": True, "message": "Recipe updated successfully", "recipe": recipe.public()})


async def delete_recipe(request: Request) -> JSONResponse:
    recipe_service: RecipeService = request.app.state.recipe_service
    await recipe_service.delete_recipe(request.path_params["recipe_id"], request.user.user_id)
    return JSONResponse({"success": True, "message": "Recipe deleted successfully"})
