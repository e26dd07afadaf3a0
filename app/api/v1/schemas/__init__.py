"""API v1 schemas package"""

from app.api.v1.schemas.common import ApiResponse
from app.api.v1.schemas.ingredient import IngredientCreateRequest, IngredientResponse, IngredientUpdateRequest
from app.api.v1.schemas.recipe import (
    GeneratedRecipeResponse,
    GenerateRecipeRequest,
    RecipeCreateRequest,
    RecipeDetailResponse,
    RecipeSummary,
    RecipeUpdateRequest,
)
from app.api.v1.schemas.vote import SaveResponse, VoteRequest, VoteResponse

__all__ = [
    # Common
    "ApiResponse",
    # Ingredients
    "IngredientResponse",
    "IngredientCreateRequest",
    "IngredientUpdateRequest",
    # Recipes
    "RecipeSummary",
    "RecipeDetailResponse",
    "RecipeCreateRequest",
    "RecipeUpdateRequest",
    "GenerateRecipeRequest",
    "GeneratedRecipeResponse",
    # Votes
    "VoteRequest",
    "VoteResponse",
    "SaveResponse",
]
