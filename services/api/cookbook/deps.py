"""FastAPI dependencies for the cookbook API.

Provides:
- Database session dependency (re-exported from db)
- A request-scoped RecipeService bound to that session
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from .db import get_db
from .services.recipe_service import RecipeService


def get_recipe_service(db: Session = Depends(get_db)) -> RecipeService:
    return RecipeService(db)
