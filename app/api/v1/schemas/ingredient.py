"""Ingredient catalogue schemas"""
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import IngredientCategory


class IngredientResponse(BaseModel):
    ingredient_id: str
    name: str
    category: IngredientCategory
    unit_of_measure: Optional[str] = None
    image_url: Optional[str] = None

    model_config = {"from_attributes": True}


class IngredientCreateRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=100, description="Ingredient name")
    category: IngredientCategory = Field(IngredientCategory.OTHER, description="Food category")
    unit_of_measure: Optional[str] = Field(None, max_length=30, description="Default unit, e.g. grams")
    image_url: Optional[str] = Field(None, max_length=500)


class IngredientUpdateRequest(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    category: Optional[IngredientCategory] = None
    unit_of_measure: Optional[str] = Field(None, max_length=30)
    image_url: Optional[str] = Field(None, max_length=500)
