"""Ingredient catalogue service - Ingredient table"""
from typing import List, Optional, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import IngredientCategory
from app.db.models import Ingredient, RecipeIngredient


async def list_ingredients(
    session: AsyncSession,
    search: Optional[str] = None,
    category: Optional[IngredientCategory] = None,
    limit: int = 100,
    offset: int = 0,
) -> List[Ingredient]:
    """
    List catalogue ingredients ordered by name.

    Args:
        session: DB session
        search: case-insensitive substring of the name
        category: restrict to one category
        limit: maximum rows
        offset: rows to skip

    Returns:
        Ingredient list
    """
    query = select(Ingredient)
    if search:
        query = query.where(func.lower(Ingredient.name).contains(search.strip().lower()))
    if category is not None:
        query = query.where(Ingredient.category == category.value)

    result = await session.execute(query.order_by(Ingredient.name).limit(limit).offset(offset))
    return list(result.scalars().all())


async def get_ingredient(session: AsyncSession, ingredient_id: str) -> Optional[Ingredient]:
    return await session.get(Ingredient, ingredient_id)


async def get_ingredients_by_ids(session: AsyncSession, ingredient_ids: Sequence[str]) -> List[Ingredient]:
    """
    Ingredients for the given ids in request order, duplicates dropped.

    Unknown ids are skipped; callers compare lengths to detect them.
    """
    unique_ids = list(dict.fromkeys(ingredient_ids))
    if not unique_ids:
        return []

    result = await session.execute(select(Ingredient).where(Ingredient.ingredient_id.in_(unique_ids)))
    by_id = {ingredient.ingredient_id: ingredient for ingredient in result.scalars().all()}
    return [by_id[ingredient_id] for ingredient_id in unique_ids if ingredient_id in by_id]


async def create_ingredient(
    session: AsyncSession,
    name: str,
    category: IngredientCategory = IngredientCategory.OTHER,
    unit_of_measure: Optional[str] = None,
    image_url: Optional[str] = None,
) -> Ingredient:
    ingredient = Ingredient(
        name=name.strip(),
        category=category.value,
        unit_of_measure=unit_of_measure,
        image_url=image_url,
    )
    session.add(ingredient)
    await session.flush()
    return ingredient


async def update_ingredient(
    session: AsyncSession,
    ingredient_id: str,
    name: Optional[str] = None,
    category: Optional[IngredientCategory] = None,
    unit_of_measure: Optional[str] = None,
    image_url: Optional[str] = None,
) -> Optional[Ingredient]:
    ingredient = await get_ingredient(session, ingredient_id)
    if not ingredient:
        return None

    if name is not None:
        ingredient.name = name.strip()
    if category is not None:
        ingredient.category = category.value
    if unit_of_measure is not None:
        ingredient.unit_of_measure = unit_of_measure or None
    if image_url is not None:
        ingredient.image_url = image_url or None

    await session.flush()
    return ingredient


async def delete_ingredient(session: AsyncSession, ingredient_id: str) -> bool:
    ingredient = await get_ingredient(session, ingredient_id)
    if not ingredient:
        return False

    await session.execute(delete(RecipeIngredient).where(RecipeIngredient.ingredient_id == ingredient_id))
    await session.delete(ingredient)
    await session.flush()
    return True
