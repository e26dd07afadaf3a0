"""initial schema: users, ingredients, recipes, votes, saved recipes, reset tokens

Revision ID: 0001_initial
Revises:
Create Date: 2025-01-12 10:00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

INGREDIENT_CATEGORIES = (
    "Meat", "Vegetables", "Fruit", "Grains", "Dairy", "Spices", "Herbs", "Oil", "Condiment", "Other",
    "Protein", "Seafood", "Legumes", "Bakery", "Baking", "Nuts", "Seeds", "Sweeteners", "Beverages", "Spreads",
)

BigIntId = sa.BigInteger().with_variant(sa.Integer(), "sqlite")


def _timestamp(name: str = "created_at") -> sa.Column:
    return sa.Column(name, sa.DateTime(), server_default=sa.func.current_timestamp(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("user_id", BigIntId, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(100), nullable=False, unique=True),
        sa.Column("password", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("image_url", sa.String(500), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
    )

    op.create_table(
        "ingredients",
        sa.Column("ingredient_id", sa.String(36), primary_key=True),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("category", sa.Enum(*INGREDIENT_CATEGORIES, name="ingredient_category_enum"), nullable=False),
        sa.Column("unit_of_measure", sa.String(30), nullable=True, comment="default unit, e.g. grams"),
        sa.Column("image_url", sa.String(500), nullable=True),
        _timestamp(),
    )
    op.create_index("ix_ingredients_name", "ingredients", ["name"])

    op.create_table(
        "recipes",
        sa.Column("recipe_id", sa.String(36), primary_key=True),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("prep_time_minutes", sa.Integer(), nullable=True),
        sa.Column("cook_time_minutes", sa.Integer(), nullable=True),
        sa.Column("servings", sa.Integer(), nullable=True),
        sa.Column("difficulty", sa.Enum("Easy", "Medium", "Hard", name="difficulty_enum"), nullable=True),
        sa.Column("instructions", sa.Text(), nullable=True, comment="newline-joined steps"),
        sa.Column("tags", sa.JSON(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True, comment="smoothed 0-10 rating"),
        sa.Column("votes", sa.Integer(), nullable=False, comment="likes - dislikes"),
        sa.Column("featured", sa.Boolean(), nullable=False),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True),
        _timestamp(),
        _timestamp("updated_at"),
    )
    op.create_index("ix_recipes_user_id", "recipes", ["user_id"])

    op.create_table(
        "recipe_ingredients",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.recipe_id", ondelete="CASCADE"), nullable=False),
        sa.Column("ingredient_id", sa.String(36), sa.ForeignKey("ingredients.ingredient_id", ondelete="CASCADE"), nullable=False),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("unit", sa.String(30), nullable=False),
        sa.Column("notes", sa.String(255), nullable=True, comment="quantity text as generated"),
        sa.UniqueConstraint("recipe_id", "ingredient_id", name="uq_recipe_ingredient"),
    )
    op.create_index("ix_recipe_ingredients_recipe_id", "recipe_ingredients", ["recipe_id"])

    op.create_table(
        "recipe_votes",
        sa.Column("vote_id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.recipe_id", ondelete="CASCADE"), nullable=False),
        sa.Column("vote_type", sa.Enum("like", "dislike", name="vote_type_enum"), nullable=False),
        _timestamp(),
        sa.UniqueConstraint("user_id", "recipe_id", name="uq_recipe_vote_user"),
    )
    op.create_index("ix_recipe_votes_recipe_id", "recipe_votes", ["recipe_id"])

    op.create_table(
        "user_saved_recipes",
        sa.Column("id", sa.String(36), primary_key=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("recipe_id", sa.String(36), sa.ForeignKey("recipes.recipe_id", ondelete="CASCADE"), nullable=False),
        _timestamp(),
        sa.UniqueConstraint("user_id", "recipe_id", name="uq_saved_recipe_user"),
    )
    op.create_index("ix_user_saved_recipes_user_id", "user_saved_recipes", ["user_id"])

    op.create_table(
        "password_reset_tokens",
        sa.Column("token_id", sa.String(36), primary_key=True),
        sa.Column("token", sa.String(128), nullable=False, unique=True),
        sa.Column("user_id", sa.BigInteger(), sa.ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        sa.Column("expires_at", sa.DateTime(), nullable=False),
        sa.Column("is_used", sa.Boolean(), nullable=False),
        _timestamp(),
    )


def downgrade() -> None:
    op.drop_table("password_reset_tokens")
    op.drop_index("ix_user_saved_recipes_user_id", table_name="user_saved_recipes")
    op.drop_table("user_saved_recipes")
    op.drop_index("ix_recipe_votes_recipe_id", table_name="recipe_votes")
    op.drop_table("recipe_votes")
    op.drop_index("ix_recipe_ingredients_recipe_id", table_name="recipe_ingredients")
    op.drop_table("recipe_ingredients")
    op.drop_index("ix_recipes_user_id", table_name="recipes")
    op.drop_table("recipes")
    op.drop_index("ix_ingredients_name", table_name="ingredients")
    op.drop_table("ingredients")
    op.drop_table("users")
    sa.Enum(name="vote_type_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="difficulty_enum").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="ingredient_category_enum").drop(op.get_bind(), checkfirst=True)
