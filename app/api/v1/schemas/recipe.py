"""Recipe schemas"""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from app.core.enums import Difficulty, IngredientCategory, VoteType
from app.services.recipe_service import (
    COOK_TIME_RATIO,
    GENERATED_SERVINGS,
    GENERATED_TAG_COUNT,
    GenerationResult,
    IngredientLine,
    RecipeDetail,
)


class RecipeSummary(BaseModel):
    """Recipe as shown in lists"""
    recipe_id: str
    title: str
    description: Optional[str] = None
    image_url: Optional[str] = None
    prep_time_minutes: Optional[int] = None
    cook_time_minutes: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    tags: List[str] = Field(default_factory=list)
    rating: Optional[int] = Field(None, ge=0, le=10, description="Smoothed 0-10 rating")
    votes: int = Field(0, description="likes - dislikes")
    featured: bool = False
    user_id: Optional[int] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class RecipeIngredientResponse(BaseModel):
    ingredient_id: str
    name: str
    category: IngredientCategory
    quantity: float
    unit: str
    notes: Optional[str] = None

    @classmethod
    def from_line(cls, line: IngredientLine) -> "RecipeIngredientResponse":
        return cls(
            ingredient_id=line.ingredient.ingredient_id,
            name=line.ingredient.name,
            category=line.ingredient.category,
            quantity=line.quantity,
            unit=line.unit,
            notes=line.notes,
        )


def _steps(instructions: Optional[str]) -> List[str]:
    return [step.strip() for step in (instructions or "").split("\n") if step.strip()]


class RecipeDetailResponse(RecipeSummary):
    """Single recipe with ingredients and the caller's vote/save state"""
    instructions: Optional[str] = None
    steps: List[str] = Field(default_factory=list)
    ingredients: List[RecipeIngredientResponse] = Field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    user_vote: Optional[VoteType] = None
    is_saved: bool = False

    @classmethod
    def from_detail(cls, detail: RecipeDetail) -> "RecipeDetailResponse":
        summary = RecipeSummary.model_validate(detail.recipe)
        return cls(
            **summary.model_dump(),
            instructions=detail.recipe.instructions,
            steps=_steps(detail.recipe.instructions),
            ingredients=[RecipeIngredientResponse.from_line(line) for line in detail.ingredients],
            likes=detail.likes,
            dislikes=detail.dislikes,
            user_vote=detail.user_vote,
            is_saved=detail.is_saved,
        )


class GenerateRecipeRequest(BaseModel):
    ingredient_ids: List[str] = Field(..., min_length=1, description="Catalogue ingredient ids")


class GeneratedIngredientResponse(BaseModel):
    name: str
    quantity: str


class GeneratedRecipeResponse(BaseModel):
    """
    A freshly generated recipe.

    recipe_id is set when the recipe was stored (signed-in callers);
    anonymous callers get the recipe in this response only.
    """
    recipe_id: Optional[str] = None
    saved: bool = Field(False, description="Whether the recipe was stored")
    title: str
    description: str
    difficulty: Difficulty
    preparation_time: int = Field(..., description="Minutes")
    cook_time_minutes: int
    servings: int
    cooking_method: str = Field(..., description="Newline-joined steps")
    steps: List[str]
    tags: List[str] = Field(default_factory=list)
    ingredients: List[RecipeIngredientResponse]
    generated_ingredients: List[GeneratedIngredientResponse]
    source: str = Field(..., description="model, backup or fallback")

    @classmethod
    def from_result(cls, result: GenerationResult) -> "GeneratedRecipeResponse":
        generated = result.generated
        recipe = result.recipe
        return cls(
            recipe_id=recipe.recipe_id if recipe else None,
            saved=recipe is not None,
            title=generated.title,
            description=generated.description,
            difficulty=generated.difficulty,
            preparation_time=generated.preparation_time,
            cook_time_minutes=round(generated.preparation_time * COOK_TIME_RATIO),
            servings=GENERATED_SERVINGS,
            cooking_method=generated.cooking_method,
            steps=generated.steps,
            tags=[line.ingredient.name for line in result.ingredients[:GENERATED_TAG_COUNT]],
            ingredients=[RecipeIngredientResponse.from_line(line) for line in result.ingredients],
            generated_ingredients=[
                GeneratedIngredientResponse(name=item.name, quantity=item.quantity) for item in generated.ingredients
            ],
            source=generated.source,
        )


class RecipeIngredientInput(BaseModel):
    ingredient_id: str
    quantity: float = Field(1.0, gt=0)
    unit: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = Field(None, max_length=255)


class RecipeIngredientUpdateRequest(BaseModel):
    quantity: Optional[float] = Field(None, gt=0)
    unit: Optional[str] = Field(None, max_length=30)
    notes: Optional[str] = Field(None, max_length=255)


class RecipeCreateRequest(BaseModel):
    """New recipe; rating and votes start at zero and change only through voting"""
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    prep_time_minutes: Optional[int] = Field(None, ge=0)
    cook_time_minutes: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    instructions: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    featured: bool = False
    ingredients: List[RecipeIngredientInput] = Field(default_factory=list)


class RecipeUpdateRequest(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, max_length=500)
    prep_time_minutes: Optional[int] = Field(None, ge=0)
    cook_time_minutes: Optional[int] = Field(None, ge=0)
    servings: Optional[int] = Field(None, ge=1)
    difficulty: Optional[Difficulty] = None
    instructions: Optional[str] = None
    tags: Optional[List[str]] = None
    featured: Optional[bool] = None
