"""Saved (bookmarked) recipes - SavedRecipe table"""
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models import Recipe, SavedRecipe


async def _saved_row(session: AsyncSession, user_id: int, recipe_id: str) -> Optional[SavedRecipe]:
    result = await session.execute(
        select(SavedRecipe).where(SavedRecipe.user_id == user_id, SavedRecipe.recipe_id == recipe_id)
    )
    return result.scalar_one_or_none()


async def is_saved(session: AsyncSession, user_id: int, recipe_id: str) -> bool:
    return await _saved_row(session, user_id, recipe_id) is not None


async def toggle_save(session: AsyncSession, user_id: int, recipe_id: str) -> Optional[bool]:
    """
    Save the recipe, or unsave it when it is already saved.

    Returns:
        The new saved state, or None when the recipe does not exist
    """
    if await session.get(Recipe, recipe_id) is None:
        return None

    existing = await _saved_row(session, user_id, recipe_id)
    if existing:
        await session.delete(existing)
        await session.flush()
        return False

    session.add(SavedRecipe(user_id=user_id, recipe_id=recipe_id))
    await session.flush()
    return True


async def saved_recipes(session: AsyncSession, user_id: int) -> List[Recipe]:
    """Recipes the user saved, most recently saved first."""
    result = await session.execute(
        select(Recipe)
        .join(SavedRecipe, SavedRecipe.recipe_id == Recipe.recipe_id)
        .where(SavedRecipe.user_id == user_id)
        .order_by(SavedRecipe.created_at.desc(), SavedRecipe.id)
    )
    return list(result.scalars().all())
