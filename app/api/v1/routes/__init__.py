"""API v1 routes package"""

from app.api.v1.routes import auth, health, ingredients, recipes

__all__ = [
    "auth",
    "health",
    "ingredients",
    "recipes",
]
