"""Recipe search criteria.

Ingredient terms match by partial, case-insensitive substring: the term
``egg`` matches a recipe containing ``Eggplant``. Servings bounds are inclusive.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional

from .errors import InvalidArgumentError


def normalize_term(term: str) -> str:
    return term.strip().lower()


def normalize_terms(terms: Optional[Iterable[str]]) -> Optional[list[str]]:
    """Lower-case and trim terms, drop blanks and duplicates (order kept).

    Returns None when nothing is left so an empty filter counts as absent.
    """
    if not terms:
        return None
    seen: list[str] = []
    for term in terms:
        if term is None:
            continue
        norm = normalize_term(term)
        if norm and norm not in seen:
            seen.append(norm)
    return seen or None


@dataclass
class RecipeSearchCriteria:
    is_vegetarian: Optional[bool] = None
    servings: Optional[int] = None
    min_servings: Optional[int] = None
    max_servings: Optional[int] = None
    include_ingredients: Optional[list[str]] = None
    exclude_ingredients: Optional[list[str]] = None
    instructions_content: Optional[str] = None

    def __post_init__(self):
        self.include_ingredients = normalize_terms(self.include_ingredients)
        self.exclude_ingredients = normalize_terms(self.exclude_ingredients)
        if self.instructions_content is not None and not self.instructions_content.strip():
            self.instructions_content = None

    @property
    def effective_servings(self) -> Optional[int]:
        """Exact servings filter, suppressed when a full min/max range is given."""
        if self.min_servings is not None and self.max_servings is not None:
            return None
        return self.servings

    @property
    def filter_count(self) -> int:
        dimensions = (
            self.is_vegetarian is not None,
            self.servings is not None,
            self.min_servings is not None,
            self.max_servings is not None,
            bool(self.include_ingredients),
            bool(self.exclude_ingredients),
            self.instructions_content is not None,
        )
        return sum(dimensions)

    @property
    def is_advanced(self) -> bool:
        """More than one filter: use the store's predicate query instead of list-all."""
        return self.filter_count > 1

    def validate(self) -> None:
        self._validate_servings_range()
        self._validate_ingredients()

    def _validate_servings_range(self) -> None:
        if (
            self.min_servings is not None
            and self.max_servings is not None
            and self.min_servings > self.max_servings
        ):
            raise InvalidArgumentError(
                f"minServings ({self.min_servings}) cannot be greater than "
                f"maxServings ({self.max_servings})"
            )

    def _validate_ingredients(self) -> None:
        if not self.include_ingredients or not self.exclude_ingredients:
            return
        overlap = sorted(set(self.include_ingredients) & set(self.exclude_ingredients))
        if overlap:
            raise InvalidArgumentError(
                "The following should not be in both includeIngredients and "
                f"excludeIngredients filter: {', '.join(overlap)}"
            )
