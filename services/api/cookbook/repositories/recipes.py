"""Recipe repository - aggregate persistence across recipes, recipes_ingredients
and instructions.

Reads always load the full aggregate in a single joined SELECT so a recipe is
observed together with all of its links and instructions. Writes never commit:
the caller owns the transaction.
"""

import uuid
from datetime import datetime, timezone
from typing import Callable, Optional

from sqlalchemy import delete, exists, func, select
from sqlalchemy.orm import Session, joinedload

from ..models import Instruction, Recipe, RecipeIngredient


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecipeRepository:
    """Repository for recipe aggregate operations."""

    def __init__(self, db: Session, clock: Callable[[], datetime] = _utcnow):
        self.db = db
        self.clock = clock

    # ==========================================
    # Reads
    # ==========================================

    def _aggregate_query(self):
        return select(Recipe).options(
            joinedload(Recipe.ingredients).joinedload(RecipeIngredient.ingredient),
            joinedload(Recipe.instructions),
        )

    def find_by_id(self, recipe_id: uuid.UUID) -> Optional[Recipe]:
        query = self._aggregate_query().where(Recipe.id == recipe_id)
        return self.db.scalars(query).unique().first()

    def exists_by_id(self, recipe_id: uuid.UUID) -> bool:
        return bool(self.db.scalar(select(exists().where(Recipe.id == recipe_id))))

    def find_all(self) -> list[Recipe]:
        query = self._aggregate_query().order_by(Recipe.created_at, Recipe.id)
        return list(self.db.scalars(query).unique().all())

    def find_with_filters(
        self,
        is_vegetarian: Optional[bool] = None,
        exact_servings: Optional[int] = None,
        min_servings: Optional[int] = None,
        max_servings: Optional[int] = None,
        instructions_content: Optional[str] = None,
    ) -> list[Recipe]:
        """Distinct recipes matching every supplied predicate; None arguments are ignored.

        Ingredient include/exclude terms are not handled here, the service
        applies them to the returned aggregates.
        """
        query = self._aggregate_query()

        if is_vegetarian is not None:
            query = query.where(Recipe.is_vegetarian == is_vegetarian)
        if exact_servings is not None:
            query = query.where(Recipe.servings == exact_servings)
        if min_servings is not None:
            query = query.where(Recipe.servings >= min_servings)
        if max_servings is not None:
            query = query.where(Recipe.servings <= max_servings)
        if instructions_content:
            # EXISTS keeps one row per recipe however many steps match
            term = instructions_content.lower()
            query = query.where(
                Recipe.instructions.any(
                    func.lower(Instruction.content).contains(term, autoescape=True)
                )
            )

        query = query.order_by(Recipe.created_at, Recipe.id)
        return list(self.db.scalars(query).unique().all())

    # ==========================================
    # Writes
    # ==========================================

    def save(self, recipe: Recipe) -> Recipe:
        """Insert or replace the whole aggregate.

        On update every existing instruction and ingredient link of the recipe
        is deleted and the ones carried by ``recipe`` are inserted, so nothing
        from the previous version survives. created_at is only set on insert;
        updated_at is set on every save.
        """
        now = self.clock()
        if recipe.id is None:
            recipe.id = uuid.uuid4()

        links = list(recipe.ingredients)
        steps = list(recipe.instructions)
        for link in links:
            link.recipe_id = recipe.id
            link.created_at = now
            link.updated_at = now
        for step in steps:
            step.recipe_id = recipe.id

        existing = self.db.get(Recipe, recipe.id)
        if existing is None:
            recipe.created_at = now
            recipe.updated_at = now
            self.db.add(recipe)
            self.db.flush()
            return recipe

        self._delete_owned_rows(existing.id)
        self.db.expire(existing, ["ingredients", "instructions"])

        # Move the children off the transient aggregate onto the persistent row
        recipe.ingredients = []
        recipe.instructions = []

        existing.title = recipe.title
        existing.description = recipe.description
        existing.servings = recipe.servings
        existing.is_vegetarian = recipe.is_vegetarian
        existing.updated_at = now
        existing.ingredients = links
        existing.instructions = steps

        self.db.flush()
        return existing

    def delete_by_id(self, recipe_id: uuid.UUID) -> None:
        """Delete the recipe and its owned rows. Absent ids are a no-op."""
        recipe = self.db.get(Recipe, recipe_id)
        if recipe is None:
            return
        self._delete_owned_rows(recipe_id)
        self.db.expire(recipe, ["ingredients", "instructions"])
        self.db.delete(recipe)
        self.db.flush()

    def _delete_owned_rows(self, recipe_id: uuid.UUID) -> None:
        self.db.execute(delete(Instruction).where(Instruction.recipe_id == recipe_id))
        self.db.execute(delete(RecipeIngredient).where(RecipeIngredient.recipe_id == recipe_id))
