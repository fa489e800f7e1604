"""Translation between request payloads, Recipe aggregates and responses.

Pure functions: no session, no I/O. Aggregates built here are transient ORM
objects that the recipe repository persists.
"""

import uuid
from typing import Iterable, Optional, Sequence

from ..models import Ingredient, Instruction, Recipe, RecipeIngredient
from ..schemas import (
    InstructionRequest,
    InstructionResponse,
    RecipeIngredientResponse,
    RecipeResponse,
    SaveRecipeRequest,
)


def derive_is_vegetarian(ingredients: Iterable[Ingredient]) -> bool:
    """True only when every ingredient is flagged vegetarian.

    False and None both count as non-vegetarian. An empty collection is
    vacuously vegetarian.
    """
    return all(ingredient.is_vegetarian is True for ingredient in ingredients)


def to_response(recipe: Recipe) -> RecipeResponse:
    links = sorted(recipe.ingredients, key=lambda link: link.position)
    steps = sorted(recipe.instructions, key=lambda step: step.step_number)
    return RecipeResponse(
        id=recipe.id,
        title=recipe.title,
        description=recipe.description,
        servings=recipe.servings,
        is_vegetarian=bool(recipe.is_vegetarian),
        ingredients=[
            RecipeIngredientResponse(
                recipe_id=link.recipe_id,
                ingredient_id=link.ingredient_id,
                name=link.ingredient.name,
                is_vegetarian=link.ingredient.is_vegetarian,
                quantity=link.quantity,
                unit=link.unit,
            )
            for link in links
        ],
        instructions=[
            InstructionResponse(
                id=step.id,
                recipe_id=step.recipe_id,
                step_number=step.step_number,
                content=step.content,
            )
            for step in steps
        ],
        created_at=recipe.created_at,
        updated_at=recipe.updated_at,
    )


def from_create(request: SaveRecipeRequest, resolved_ingredients: Sequence[Ingredient]) -> Recipe:
    return _from_request(request, None, resolved_ingredients)


def from_update(
    request: SaveRecipeRequest,
    recipe_id: uuid.UUID,
    resolved_ingredients: Sequence[Ingredient],
) -> Recipe:
    return _from_request(request, recipe_id, resolved_ingredients)


def with_recipe_id(recipe: Recipe, recipe_id: uuid.UUID) -> Recipe:
    """Stamp an id onto an aggregate and every row it owns."""
    recipe.id = recipe_id
    for link in recipe.ingredients:
        link.recipe_id = recipe_id
    for step in recipe.instructions:
        step.recipe_id = recipe_id
    return recipe


def build_instructions(
    instructions: Sequence[InstructionRequest], recipe_id: Optional[uuid.UUID]
) -> list[Instruction]:
    # step numbers follow request order, starting at 1
    return [
        Instruction(
            id=uuid.uuid4(),
            recipe_id=recipe_id,
            step_number=number,
            content=item.content,
        )
        for number, item in enumerate(instructions, start=1)
    ]


def _from_request(
    request: SaveRecipeRequest,
    recipe_id: Optional[uuid.UUID],
    resolved_ingredients: Sequence[Ingredient],
) -> Recipe:
    if len(resolved_ingredients) != len(request.ingredients):
        raise ValueError("resolved ingredients must line up with the request ingredients")

    # Derived from the stored ingredient flags, never from the request
    recipe = Recipe(
        id=recipe_id,
        title=request.title,
        description=request.description,
        servings=request.serving_size,
        is_vegetarian=derive_is_vegetarian(resolved_ingredients),
    )
    recipe.ingredients = [
        RecipeIngredient(
            recipe_id=recipe_id,
            ingredient_id=ingredient.id,
            ingredient=ingredient,
            quantity=item.quantity,
            unit=item.unit,
            position=position,
        )
        for position, (ingredient, item) in enumerate(zip(resolved_ingredients, request.ingredients))
    ]
    recipe.instructions = build_instructions(request.instructions, recipe_id)
    return recipe
