"""Recipes API router.

Endpoints:
- POST   /v1/recipes       - Create recipe (honours an optional Idempotency-Key header)
- GET    /v1/recipes       - Search recipes
- GET    /v1/recipes/{id}  - Get recipe with ingredients and instructions
- PUT    /v1/recipes/{id}  - Replace recipe, including ingredients and instructions
- DELETE /v1/recipes/{id}  - Delete recipe and everything it owns

Ingredient filters match partially: includeIngredients=egg also matches "eggplant".
"""

import logging
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from ..deps import get_recipe_service
from ..infra.idempotency import idempotency_clear_key, idempotency_precheck, idempotency_store_result
from ..schemas import ApiResponse, RecipeResponse, SaveRecipeRequest
from ..search import RecipeSearchCriteria
from ..services.recipe_service import RecipeService

router = APIRouter(prefix="/v1/recipes")
logger = logging.getLogger("cookbook.recipes")


def split_terms(values: Optional[list[str]]) -> Optional[list[str]]:
    """Accept both repeated (?x=a&x=b) and comma separated (?x=a,b) parameters."""
    if not values:
        return None
    terms = [part.strip() for value in values for part in value.split(",")]
    return [t for t in terms if t] or None


@router.post(
    "",
    response_model=ApiResponse[RecipeResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Create a new recipe",
)
async def create_recipe(
    payload: SaveRecipeRequest,
    request: Request,
    service: RecipeService = Depends(get_recipe_service),
):
    """Create a recipe with its ingredients and instructions.

    The recipe is marked vegetarian only when every stored ingredient is vegetarian.
    """
    pre = await idempotency_precheck(request, route_key="recipes_create")
    if isinstance(pre, JSONResponse):
        return pre

    try:
        created = service.create(payload)
    except Exception:
        if pre is not None:
            await idempotency_clear_key(pre[0])
        raise

    body = ApiResponse[RecipeResponse](data=created).model_dump(mode="json", by_alias=True)
    if pre is not None:
        redis_key, req_hash = pre
        await idempotency_store_result(redis_key, req_hash, status=status.HTTP_201_CREATED, body=body)
    return JSONResponse(status_code=status.HTTP_201_CREATED, content=body)


@router.get(
    "",
    response_model=ApiResponse[list[RecipeResponse]],
    summary="Search recipes",
)
def search_recipes(
    servings: Optional[int] = Query(None, ge=1, description="Exact number of servings"),
    min_servings: Optional[int] = Query(None, ge=1, alias="minServings"),
    max_servings: Optional[int] = Query(None, ge=1, alias="maxServings"),
    is_vegetarian: Optional[bool] = Query(None, alias="isVegetarian"),
    include_ingredients: Optional[list[str]] = Query(
        None, alias="includeIngredients",
        description="Recipe must contain every term (partial, case-insensitive)",
    ),
    exclude_ingredients: Optional[list[str]] = Query(
        None, alias="excludeIngredients",
        description="Recipe must contain none of the terms (partial, case-insensitive)",
    ),
    instruction_content: Optional[str] = Query(None, alias="instructionContent"),
    service: RecipeService = Depends(get_recipe_service),
):
    """Search recipes. Multiple filters combine with AND."""
    criteria = RecipeSearchCriteria(
        is_vegetarian=is_vegetarian,
        servings=servings,
        min_servings=min_servings,
        max_servings=max_servings,
        include_ingredients=split_terms(include_ingredients),
        exclude_ingredients=split_terms(exclude_ingredients),
        instructions_content=instruction_content,
    )
    results = service.search(criteria)
    return ApiResponse[list[RecipeResponse]](data=results)


@router.get(
    "/{recipe_id}",
    response_model=ApiResponse[RecipeResponse],
    summary="Get recipe by ID",
)
def get_recipe(
    recipe_id: uuid.UUID,
    service: RecipeService = Depends(get_recipe_service),
):
    logger.info(f"Fetching recipe with ID: {recipe_id}")
    return ApiResponse[RecipeResponse](data=service.get(recipe_id))


@router.put(
    "/{recipe_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Update an existing recipe",
)
def update_recipe(
    recipe_id: uuid.UUID,
    payload: SaveRecipeRequest,
    service: RecipeService = Depends(get_recipe_service),
):
    """Replace all recipe data. Ingredient links and instructions are replaced wholesale."""
    service.update(recipe_id, payload)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "/{recipe_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a recipe",
)
def delete_recipe(
    recipe_id: uuid.UUID,
    service: RecipeService = Depends(get_recipe_service),
):
    service.delete(recipe_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
