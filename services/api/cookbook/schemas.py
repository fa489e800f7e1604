"""Pydantic schemas for the cookbook API.

Request/response models for:
- Saving a recipe (create and full-replace update)
- Recipe responses with ingredient links and instructions
- The response envelope shared by every endpoint

JSON field names are camelCase; Python attributes stay snake_case.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator, model_serializer
from pydantic.alias_generators import to_camel

# Quantities go out as JSON numbers rather than strings
Quantity = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _not_blank(value: Optional[str], field: str) -> Optional[str]:
    if value is not None and not value.strip():
        raise ValueError(f"{field} must not be blank")
    return value


# --- Requests ---

class IngredientRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=255, json_schema_extra={"example": "egg"})
    # Stored as NUMERIC(12, 3)
    quantity: Decimal = Field(
        ..., gt=0, max_digits=12, decimal_places=3, json_schema_extra={"example": "0.25"}
    )
    unit: Optional[str] = Field(None, max_length=50, json_schema_extra={"example": "dozen"})
    # Only used when the ingredient does not exist yet
    is_vegetarian: Optional[bool] = False

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        return _not_blank(v, "Ingredient name").strip()


class InstructionRequest(CamelModel):
    content: str = Field(..., min_length=1, json_schema_extra={"example": "Add salt and pepper to taste."})

    @field_validator("content")
    @classmethod
    def _content_not_blank(cls, v):
        return _not_blank(v, "Instruction content")


class SaveRecipeRequest(CamelModel):
    """Body for POST /v1/recipes and PUT /v1/recipes/{id}."""
    title: str = Field(..., min_length=3, max_length=255, json_schema_extra={"example": "Breakfast Omelette"})
    description: Optional[str] = Field(None, min_length=3, max_length=1000)
    serving_size: int = Field(..., gt=0, json_schema_extra={"example": 4})
    ingredients: list[IngredientRequest] = Field(..., min_length=1)
    instructions: list[InstructionRequest] = Field(..., min_length=1)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v):
        return _not_blank(v, "Recipe title")


# --- Responses ---

class RecipeIngredientResponse(CamelModel):
    recipe_id: uuid.UUID
    ingredient_id: uuid.UUID
    name: str
    is_vegetarian: Optional[bool]
    quantity: Quantity
    unit: Optional[str]


class InstructionResponse(CamelModel):
    id: uuid.UUID
    recipe_id: uuid.UUID
    step_number: int
    content: str


class RecipeResponse(CamelModel):
    id: uuid.UUID
    title: str
    description: Optional[str]
    servings: int
    is_vegetarian: bool
    ingredients: list[RecipeIngredientResponse] = []
    instructions: list[InstructionResponse] = []
    created_at: Optional[datetime]
    updated_at: Optional[datetime]


# --- Envelope ---

T = TypeVar("T")


class ApiResponse(CamelModel, Generic[T]):
    """{data?, success, errorCode?, errorMessage?}; unset envelope fields are omitted."""
    data: Optional[T] = None
    success: bool = True
    error_code: Optional[int] = None
    error_message: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_none(self, handler) -> dict[str, Any]:
        return {k: v for k, v in handler(self).items() if v is not None}

    @classmethod
    def ok(cls, data: Any) -> "ApiResponse":
        return cls(data=data)

    @classmethod
    def error(cls, message: str, code: Optional[int] = None) -> "ApiResponse":
        return cls(success=False, error_code=code, error_message=message)
