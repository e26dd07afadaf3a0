"""Database package - models, session, and base classes."""
from app.db.base import Base
from app.db.models import (
    Ingredient,
    PasswordResetToken,
    Recipe,
    RecipeIngredient,
    RecipeVote,
    SavedRecipe,
    User,
)
from app.db.session import SessionLocal, engine, get_session

__all__ = [
    "Base",
    "User",
    "Ingredient",
    "Recipe",
    "RecipeIngredient",
    "RecipeVote",
    "SavedRecipe",
    "PasswordResetToken",
    # Session
    "engine",
    "SessionLocal",
    "get_session",
]
