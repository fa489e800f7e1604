"""Recipe service - orchestrates the recipe write path and search.

Writes (create, update, delete) run in one database transaction each, spanning
ingredient upserts, the recipe row, its instructions and its ingredient links.
The vegetarian flag is always recomputed from the stored ingredient rows.
"""

import logging
import uuid
from contextlib import contextmanager
from typing import Callable, Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..errors import ConflictError, InternalError, InvalidArgumentError, RecipeNotFoundError
from ..models import Ingredient, Recipe
from ..repositories.ingredients import IngredientRepository
from ..repositories.recipes import RecipeRepository
from ..schemas import IngredientRequest, RecipeResponse, SaveRecipeRequest
from ..search import RecipeSearchCriteria, normalize_term
from ..settings import settings
from . import recipe_mapper

logger = logging.getLogger("cookbook.service")


def recipe_ingredient_names(recipe: Recipe) -> list[str]:
    return [link.ingredient.name.lower() for link in recipe.ingredients]


def contains_term(names: Iterable[str], term: str) -> bool:
    """Partial match: "egg" is contained in "eggplant"."""
    term = normalize_term(term)
    return any(term in name for name in names)


def matches_ingredient_criteria(recipe: Recipe, criteria: RecipeSearchCriteria) -> bool:
    names = recipe_ingredient_names(recipe)
    if criteria.include_ingredients:
        if not all(contains_term(names, term) for term in criteria.include_ingredients):
            return False
    if criteria.exclude_ingredients:
        if any(contains_term(names, term) for term in criteria.exclude_ingredients):
            return False
    return True


@contextmanager
def _translate_db_errors():
    try:
        yield
    except SQLAlchemyError as exc:
        logger.error(f"Database failure: {exc}")
        raise InternalError(str(exc)) from exc


class RecipeService:
    def __init__(
        self,
        db: Session,
        recipes: Optional[RecipeRepository] = None,
        ingredients: Optional[IngredientRepository] = None,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
        result_limit: Optional[int] = None,
    ):
        self.db = db
        self.recipes = recipes or RecipeRepository(db)
        self.ingredients = ingredients or IngredientRepository(db)
        self.id_factory = id_factory
        self.result_limit = settings.search_result_limit if result_limit is None else result_limit

    @contextmanager
    def _transaction(self):
        with _translate_db_errors():
            try:
                yield
                self.db.commit()
            except Exception:
                self.db.rollback()
                raise

    # --- Reads ---

    def get(self, recipe_id: uuid.UUID) -> RecipeResponse:
        with _translate_db_errors():
            recipe = self.recipes.find_by_id(recipe_id)
            if recipe is None:
                raise RecipeNotFoundError(recipe_id)
            return recipe_mapper.to_response(recipe)

    def search(self, criteria: RecipeSearchCriteria) -> list[RecipeResponse]:
        criteria.validate()

        with _translate_db_errors():
            if criteria.is_advanced:
                candidates = self.recipes.find_with_filters(
                    is_vegetarian=criteria.is_vegetarian,
                    exact_servings=criteria.effective_servings,
                    min_servings=criteria.min_servings,
                    max_servings=criteria.max_servings,
                    instructions_content=criteria.instructions_content,
                )
            else:
                candidates = self.recipes.find_all()

            # Ingredient terms are applied here, on the loaded aggregates
            matched = [r for r in candidates if matches_ingredient_criteria(r, criteria)]
            if len(matched) > self.result_limit:
                logger.warning(
                    f"Search matched {len(matched)} recipes, returning the first {self.result_limit}"
                )
                matched = matched[: self.result_limit]
            return [recipe_mapper.to_response(r) for r in matched]

    # --- Writes ---

    def create(self, request: SaveRecipeRequest) -> RecipeResponse:
        logger.info(f"Creating new recipe with title: {request.title}")
        self.validate_request(request)

        with self._transaction():
            resolved = self._upsert_ingredients(request.ingredients)
            recipe = recipe_mapper.from_create(request, resolved)
            recipe_mapper.with_recipe_id(recipe, self.id_factory())
            saved = self.recipes.save(recipe)
            response = recipe_mapper.to_response(saved)

        logger.info(f"Successfully created recipe with ID: {response.id}")
        return response

    def update(self, recipe_id: uuid.UUID, request: SaveRecipeRequest) -> None:
        """Replace title, description, servings, every ingredient link and every instruction."""
        logger.info(f"Updating recipe with ID: {recipe_id}")
        self.validate_request(request)

        with self._transaction():
            if not self.recipes.exists_by_id(recipe_id):
                raise RecipeNotFoundError(recipe_id)
            resolved = self._upsert_ingredients(request.ingredients)
            recipe = recipe_mapper.from_update(request, recipe_id, resolved)
            self.recipes.save(recipe)

        logger.info(f"Successfully updated recipe with ID: {recipe_id}")

    def delete(self, recipe_id: uuid.UUID) -> None:
        logger.info(f"Deleting recipe with ID: {recipe_id}")
        with self._transaction():
            if not self.recipes.exists_by_id(recipe_id):
                raise RecipeNotFoundError(recipe_id)
            self.recipes.delete_by_id(recipe_id)
        logger.info(f"Successfully deleted recipe with ID: {recipe_id}")

    # --- Helpers ---

    @staticmethod
    def validate_request(request: SaveRecipeRequest) -> None:
        if not request.ingredients:
            raise InvalidArgumentError("At least one ingredient is required")
        if not request.instructions:
            raise InvalidArgumentError("At least one instruction is required")

        seen: set[str] = set()
        duplicates: list[str] = []
        for position, item in enumerate(request.ingredients):
            if not item.name or not item.name.strip():
                raise InvalidArgumentError(f"ingredients[{position}].name: Ingredient name is required")
            if item.quantity is None or item.quantity <= 0:
                raise InvalidArgumentError(f"ingredients[{position}].quantity: Quantity must be positive")
            key = normalize_term(item.name)
            if key in seen and key not in duplicates:
                duplicates.append(key)
            seen.add(key)
        if duplicates:
            raise InvalidArgumentError(f"Ingredients listed more than once: {', '.join(duplicates)}")

        for position, step in enumerate(request.instructions):
            if not step.content or not step.content.strip():
                raise InvalidArgumentError(f"instructions[{position}].content: Instruction content is required")

    def _upsert_ingredients(self, items: list[IngredientRequest]) -> list[Ingredient]:
        # One lookup per ingredient; result order matches the request
        return [self._upsert_ingredient(item) for item in items]

    def _upsert_ingredient(self, item: IngredientRequest) -> Ingredient:
        existing = self.ingredients.find_by_name_case_insensitive(item.name)
        if existing is not None:
            return existing

        logger.debug(f"Creating new ingredient: {item.name}")
        try:
            return self.ingredients.save(
                Ingredient(id=self.id_factory(), name=item.name.strip(), is_vegetarian=item.is_vegetarian)
            )
        except ConflictError:
            # Lost an insert race: reuse the row the other writer committed
            winner = self.ingredients.find_by_name_case_insensitive(item.name)
            if winner is None:
                raise
            return winner
