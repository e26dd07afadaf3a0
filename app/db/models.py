"""Database models for users, the ingredient catalogue, recipes and votes."""
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.core.enums import Difficulty, IngredientCategory, VoteType
from app.db.base import Base, BigIntId, new_id


class User(Base):
    """Registered account"""

    __tablename__ = "users"

    user_id: Mapped[int] = mapped_column(BigIntId, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<User(user_id={self.user_id}, email={self.email})>"


class Ingredient(Base):
    """Ingredient catalogue entry (reference data)"""

    __tablename__ = "ingredients"

    ingredient_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    category: Mapped[str] = mapped_column(
        Enum(*[c.value for c in IngredientCategory], name="ingredient_category_enum"),
        nullable=False,
        default=IngredientCategory.OTHER.value,
    )
    unit_of_measure: Mapped[Optional[str]] = mapped_column(String(30), nullable=True, comment="default unit, e.g. grams")
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<Ingredient(ingredient_id={self.ingredient_id}, name={self.name})>"


class Recipe(Base):
    """Persisted recipe. rating and votes are rewritten on every vote mutation."""

    __tablename__ = "recipes"

    recipe_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    prep_time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    cook_time_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    servings: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    difficulty: Mapped[Optional[str]] = mapped_column(
        Enum(*[d.value for d in Difficulty], name="difficulty_enum"),
        nullable=True,
    )
    instructions: Mapped[Optional[str]] = mapped_column(Text, nullable=True, comment="newline-joined steps")
    tags: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    rating: Mapped[Optional[int]] = mapped_column(Integer, nullable=True, default=0, comment="smoothed 0-10 rating")
    votes: Mapped[int] = mapped_column(Integer, nullable=False, default=0, comment="likes - dislikes")
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    user_id: Mapped[Optional[int]] = mapped_column(BigInteger, ForeignKey("users.user_id", ondelete="SET NULL"), nullable=True, index=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp(), onupdate=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<Recipe(recipe_id={self.recipe_id}, title={self.title})>"


class RecipeIngredient(Base):
    """Quantity of one catalogue ingredient in one recipe"""

    __tablename__ = "recipe_ingredients"
    __table_args__ = (UniqueConstraint("recipe_id", "ingredient_id", name="uq_recipe_ingredient"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.recipe_id", ondelete="CASCADE"), nullable=False, index=True)
    ingredient_id: Mapped[str] = mapped_column(String(36), ForeignKey("ingredients.ingredient_id", ondelete="CASCADE"), nullable=False)
    quantity: Mapped[float] = mapped_column(Float, nullable=False, default=1.0)
    unit: Mapped[str] = mapped_column(String(30), nullable=False, default="unit")
    notes: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, comment="quantity text as generated")

    def __repr__(self) -> str:
        return f"<RecipeIngredient(recipe_id={self.recipe_id}, ingredient_id={self.ingredient_id}, quantity={self.quantity} {self.unit})>"


class RecipeVote(Base):
    """At most one vote per (user, recipe)"""

    __tablename__ = "recipe_votes"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_recipe_vote_user"),)

    vote_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.recipe_id", ondelete="CASCADE"), nullable=False, index=True)
    vote_type: Mapped[str] = mapped_column(Enum(*[v.value for v in VoteType], name="vote_type_enum"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<RecipeVote(user_id={self.user_id}, recipe_id={self.recipe_id}, vote_type={self.vote_type})>"


class SavedRecipe(Base):
    """A user's bookmarked recipe"""

    __tablename__ = "user_saved_recipes"
    __table_args__ = (UniqueConstraint("user_id", "recipe_id", name="uq_saved_recipe_user"),)

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False, index=True)
    recipe_id: Mapped[str] = mapped_column(String(36), ForeignKey("recipes.recipe_id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<SavedRecipe(user_id={self.user_id}, recipe_id={self.recipe_id})>"


class PasswordResetToken(Base):
    """Single-use password reset token"""

    __tablename__ = "password_reset_tokens"

    token_id: Mapped[str] = mapped_column(String(36), primary_key=True, default=new_id)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    user_id: Mapped[int] = mapped_column(BigInteger, ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, server_default=func.current_timestamp())

    def __repr__(self) -> str:
        return f"<PasswordResetToken(user_id={self.user_id}, is_used={self.is_used})>"
