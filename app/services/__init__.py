"""Services package - business logic"""
# noqa: D104

from . import auth_service
from . import ingredient_service
from . import recipe_service
from . import saved_recipe_service
from . import vote_service

__all__ = [
    "auth_service",
    "ingredient_service",
    "recipe_service",
    "saved_recipe_service",
    "vote_service",
]
