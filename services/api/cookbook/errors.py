"""Domain failures raised by the cookbook core.

Each kind carries a human message and an optional numeric code. Nothing here
knows about HTTP; ``cookbook.handlers`` is the only place mapping a kind to a
transport status.
"""

from typing import Optional


class DomainError(Exception):
    code: Optional[int] = None

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(DomainError):
    code = 1


class RecipeNotFoundError(NotFoundError):
    def __init__(self, recipe_id):
        super().__init__(f"Recipe not found with ID: {recipe_id}")
        self.recipe_id = recipe_id


class InvalidArgumentError(DomainError):
    pass


class ConflictError(DomainError):
    pass


class InternalError(DomainError):
    pass
