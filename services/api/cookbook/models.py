"""SQLAlchemy ORM models for the cookbook.

Tables:
- recipes: Recipe rows; is_vegetarian is derived from the linked ingredients on every save
- ingredients: Shared ingredient catalogue, unique by lower(name)
- recipes_ingredients: Recipe <-> ingredient association with quantity/unit (owned by the recipe)
- instructions: Ordered cooking steps, dense step_number 1..N per recipe
"""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    String,
    DateTime,
    Text,
    Integer,
    Boolean,
    ForeignKey,
    Index,
    Numeric,
    CheckConstraint,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base
from .orm_types import UUIDType


class Recipe(Base):
    """Aggregate root: owns its instructions and ingredient links."""
    __tablename__ = "recipes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(), primary_key=True, default=uuid.uuid4
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # 1 serving = serves 1 adult
    servings: Mapped[int] = mapped_column(Integer, nullable=False)
    is_vegetarian: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True, default=False)

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    ingredients: Mapped[list["RecipeIngredient"]] = relationship(
        "RecipeIngredient", back_populates="recipe", cascade="all, delete-orphan",
        order_by="RecipeIngredient.position", passive_deletes=True,
    )
    instructions: Mapped[list["Instruction"]] = relationship(
        "Instruction", back_populates="recipe", cascade="all, delete-orphan",
        order_by="Instruction.step_number", passive_deletes=True,
    )


class Ingredient(Base):
    """Ingredient shared across recipes. Never deleted through the recipe API."""
    __tablename__ = "ingredients"

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(), primary_key=True, default=uuid.uuid4
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    is_vegetarian: Mapped[Optional[bool]] = mapped_column(Boolean, nullable=True)


# Case-insensitive uniqueness of ingredient names
Index("uq_ingredients_name_lower", func.lower(Ingredient.name), unique=True)


class RecipeIngredient(Base):
    """Junction row between a recipe and an ingredient."""
    __tablename__ = "recipes_ingredients"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_recipes_ingredients_quantity_positive"),
        Index("ix_recipes_ingredients_ingredient_id", "ingredient_id"),
    )

    recipe_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(), ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True
    )
    ingredient_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(), ForeignKey("ingredients.id", ondelete="RESTRICT"), primary_key=True
    )

    quantity: Mapped[Decimal] = mapped_column(Numeric(12, 3), nullable=False)
    unit: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    # Order of the link in the request that saved the recipe
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    updated_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Relationships
    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="ingredients")
    ingredient: Mapped["Ingredient"] = relationship("Ingredient")


class Instruction(Base):
    """Cooking step. step_number is assigned by the server, never by clients."""
    __tablename__ = "instructions"
    __table_args__ = (
        UniqueConstraint("recipe_id", "step_number", name="uq_instructions_recipe_step"),
        CheckConstraint("step_number >= 1", name="ck_instructions_step_number_positive"),
        Index("ix_instructions_recipe_id", "recipe_id"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(), primary_key=True, default=uuid.uuid4
    )
    recipe_id: Mapped[uuid.UUID] = mapped_column(
        UUIDType(), ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False
    )
    step_number: Mapped[int] = mapped_column(Integer, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)

    # Relationships
    recipe: Mapped["Recipe"] = relationship("Recipe", back_populates="instructions")
