"""Initial schema with recipes, ingredients, recipes_ingredients, instructions

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001_initial_schema"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Recipes table
    op.create_table(
        "recipes",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("servings", sa.Integer, nullable=False),
        sa.Column("is_vegetarian", sa.Boolean, nullable=True, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    # Ingredients table (names unique ignoring case)
    op.create_table(
        "ingredients",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("is_vegetarian", sa.Boolean, nullable=True),
    )
    op.create_index(
        "uq_ingredients_name_lower",
        "ingredients",
        [sa.text("lower(name)")],
        unique=True,
    )

    # Instructions table
    op.create_table(
        "instructions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("recipes.id", ondelete="CASCADE"), nullable=False),
        sa.Column("step_number", sa.Integer, nullable=False),
        sa.Column("content", sa.Text, nullable=False),
        sa.UniqueConstraint("recipe_id", "step_number", name="uq_instructions_recipe_step"),
        sa.CheckConstraint("step_number >= 1", name="ck_instructions_step_number_positive"),
    )
    op.create_index("ix_instructions_recipe_id", "instructions", ["recipe_id"])

    # Recipe <-> ingredient association
    op.create_table(
        "recipes_ingredients",
        sa.Column("recipe_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("recipes.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("ingredient_id", postgresql.UUID(as_uuid=True), sa.ForeignKey("ingredients.id", ondelete="RESTRICT"), primary_key=True),
        sa.Column("quantity", sa.Numeric(12, 3), nullable=False),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("position", sa.Integer, nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint("quantity > 0", name="ck_recipes_ingredients_quantity_positive"),
    )
    op.create_index("ix_recipes_ingredients_ingredient_id", "recipes_ingredients", ["ingredient_id"])


def downgrade() -> None:
    op.drop_table("recipes_ingredients")
    op.drop_table("instructions")
    op.drop_index("uq_ingredients_name_lower", table_name="ingredients")
    op.drop_table("ingredients")
    op.drop_table("recipes")
