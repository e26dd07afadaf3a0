"""Ingredient catalogue routes"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import require_authentication
from app.api.v1.schemas.common import ApiResponse
from app.api.v1.schemas.ingredient import (
    IngredientCreateRequest,
    IngredientResponse,
    IngredientUpdateRequest,
)
from app.core.enums import IngredientCategory
from app.db.session import get_session
from app.services import ingredient_service

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("", response_model=ApiResponse[List[IngredientResponse]])
async def list_ingredients(
    search: Optional[str] = Query(None, description="Case-insensitive name search"),
    category: Optional[IngredientCategory] = Query(None, description="Filter by category"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[List[IngredientResponse]]:
    """
    Catalogue ingredients ordered by name.

    **Args:**
        search: part of the ingredient name
        category: one of the food categories
    """
    ingredients = await ingredient_service.list_ingredients(
        session, search=search, category=category, limit=limit, offset=offset
    )
    data = [IngredientResponse.model_validate(ingredient) for ingredient in ingredients]
    return ApiResponse(success=True, data=data, message=f"Found {len(data)} ingredients.")


@router.get("/categories", response_model=ApiResponse[List[IngredientCategory]])
async def list_categories() -> ApiResponse[List[IngredientCategory]]:
    return ApiResponse(success=True, data=list(IngredientCategory))


@router.get("/{ingredient_id}", response_model=ApiResponse[IngredientResponse])
async def get_ingredient(
    ingredient_id: str,
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[IngredientResponse]:
    ingredient = await ingredient_service.get_ingredient(session, ingredient_id)
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found.")
    return ApiResponse(success=True, data=IngredientResponse.model_validate(ingredient))


@router.post("", response_model=ApiResponse[IngredientResponse], status_code=status.HTTP_201_CREATED)
async def create_ingredient(
    payload: IngredientCreateRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[IngredientResponse]:
    try:
        ingredient = await ingredient_service.create_ingredient(
            session,
            name=payload.name,
            category=payload.category,
            unit_of_measure=payload.unit_of_measure,
            image_url=payload.image_url,
        )
        await session.commit()
    except Exception as e:
        await session.rollback()
        logger.exception("Creating ingredient %r failed", payload.name)
        raise HTTPException(status_code=500, detail=f"Could not create ingredient: {str(e)}")

    logger.info("User %s added ingredient %s (%s)", user_id, ingredient.ingredient_id, ingredient.name)
    return ApiResponse(
        success=True,
        data=IngredientResponse.model_validate(ingredient),
        message=f"Added {ingredient.name}.",
    )


@router.put("/{ingredient_id}", response_model=ApiResponse[IngredientResponse])
async def update_ingredient(
    ingredient_id: str,
    payload: IngredientUpdateRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[IngredientResponse]:
    ingredient = await ingredient_service.update_ingredient(
        session,
        ingredient_id,
        name=payload.name,
        category=payload.category,
        unit_of_measure=payload.unit_of_measure,
        image_url=payload.image_url,
    )
    if not ingredient:
        raise HTTPException(status_code=404, detail="Ingredient not found.")
    await session.commit()
    return ApiResponse(success=True, data=IngredientResponse.model_validate(ingredient))


@router.delete("/{ingredient_id}", response_model=ApiResponse[None])
async def delete_ingredient(
    ingredient_id: str,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[None]:
    deleted = await ingredient_service.delete_ingredient(session, ingredient_id)
    if not deleted:
        raise HTTPException(status_code=404, detail="Ingredient not found.")
    await session.commit()
    logger.info("User %s deleted ingredient %s", user_id, ingredient_id)
    return ApiResponse(success=True, message="Ingredient deleted.")
