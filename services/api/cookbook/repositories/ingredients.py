"""Ingredient repository - upsert-by-name primitives.

Names are unique under case-insensitive comparison (functional unique index on
lower(name)); this repository never updates or deletes ingredients.
"""

import logging
import uuid
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..errors import ConflictError
from ..models import Ingredient

logger = logging.getLogger("cookbook.ingredients")


class IngredientRepository:
    """Repository for ingredient lookups and inserts."""

    def __init__(self, db: Session):
        self.db = db

    def find_by_name_case_insensitive(self, name: str) -> Optional[Ingredient]:
        return self.db.scalar(
            select(Ingredient).where(func.lower(Ingredient.name) == func.lower(name.strip()))
        )

    def save(self, ingredient: Ingredient) -> Ingredient:
        """Insert a new ingredient.

        The insert runs inside a SAVEPOINT so a duplicate name only rolls back
        this row, not the caller's transaction.

        Raises:
            ConflictError: an ingredient with the same case-insensitive name exists
        """
        if ingredient.id is None:
            ingredient.id = uuid.uuid4()
        try:
            with self.db.begin_nested():
                self.db.add(ingredient)
                self.db.flush()
        except IntegrityError as exc:
            logger.info(f"Ingredient '{ingredient.name}' already exists: {exc.orig}")
            raise ConflictError(f"Ingredient already exists: {ingredient.name}") from exc
        return ingredient
