"""Recipe service - Recipe / RecipeIngredient tables and recipe generation"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from sqlalchemy import String, cast, delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import Difficulty, VoteType
from app.db.models import Ingredient, Recipe, RecipeIngredient, RecipeVote, SavedRecipe
from app.services import ingredient_service, saved_recipe_service, vote_service
from app.services.recipe_synthesizer import (
    DEFAULT_QUANTITY_TEXT,
    GeneratedIngredient,
    GeneratedRecipe,
    RecipeSynthesizer,
    extract_quantity,
)

logger = logging.getLogger(__name__)

POPULAR_LIMIT = 12
GENERATED_SERVINGS = 4
GENERATED_TAG_COUNT = 3
COOK_TIME_RATIO = 0.6

# Fields an owner may edit; rating and votes only change through voting.
EDITABLE_FIELDS = (
    "title",
    "description",
    "image_url",
    "prep_time_minutes",
    "cook_time_minutes",
    "servings",
    "difficulty",
    "instructions",
    "tags",
    "featured",
)
REQUIRED_FIELDS = ("title", "tags", "featured")


class RecipeAccessError(PermissionError):
    """Raised when a user changes a recipe they do not own."""


@dataclass
class IngredientLine:
    """One ingredient of a recipe, persisted or not."""

    ingredient: Ingredient
    quantity: float
    unit: str
    notes: Optional[str] = None


@dataclass
class RecipeDetail:
    recipe: Recipe
    ingredients: List[IngredientLine] = field(default_factory=list)
    likes: int = 0
    dislikes: int = 0
    user_vote: Optional[VoteType] = None
    is_saved: bool = False


@dataclass
class GenerationResult:
    """
    Outcome of a generation request.

    `recipe` is the stored row for signed-in users and None for anonymous
    ones, whose recipe exists only in this response.
    """

    generated: GeneratedRecipe
    ingredients: List[IngredientLine]
    recipe: Optional[Recipe] = None


def _match_generated(ingredient: Ingredient, generated: Sequence[GeneratedIngredient]) -> Optional[GeneratedIngredient]:
    name = ingredient.name.lower()
    for item in generated:
        if name in item.name.lower():
            return item
    return None


def reconcile_ingredients(
    catalogue_ingredients: Sequence[Ingredient],
    generated: Sequence[GeneratedIngredient],
) -> List[IngredientLine]:
    """
    Quantity and unit for each catalogue ingredient from the generated list.

    A generated entry matches when its name contains the catalogue name
    (case-insensitive). Unmatched ingredients get quantity 1 in their own
    unit of measure.
    """
    lines = []
    for ingredient in catalogue_ingredients:
        match = _match_generated(ingredient, generated)
        quantity_text = match.quantity if match else None
        quantity, unit = extract_quantity(quantity_text, ingredient.unit_of_measure)
        lines.append(
            IngredientLine(
                ingredient=ingredient,
                quantity=quantity,
                unit=unit,
                notes=quantity_text or DEFAULT_QUANTITY_TEXT,
            )
        )
    return lines


async def get_recipe(session: AsyncSession, recipe_id: str) -> Optional[Recipe]:
    return await session.get(Recipe, recipe_id)


async def list_recipes(
    session: AsyncSession,
    search: Optional[str] = None,
    tag: Optional[str] = None,
    featured: Optional[bool] = None,
    difficulty: Optional[Difficulty] = None,
    limit: int = 50,
    offset: int = 0,
) -> List[Recipe]:
    """
    Newest recipes first, optionally filtered.

    Args:
        session: DB session
        search: case-insensitive substring of the title
        tag: exact tag, case-insensitive
        featured: only featured (True) or non-featured (False) recipes
        difficulty: Easy / Medium / Hard
    """
    query = select(Recipe)
    if search:
        query = query.where(func.lower(Recipe.title).contains(search.strip().lower()))
    if featured is not None:
        query = query.where(Recipe.featured.is_(featured))
    if difficulty is not None:
        query = query.where(Recipe.difficulty == difficulty.value)
    if tag:
        # tags is a JSON array; match the quoted element in its serialized text
        query = query.where(
            func.lower(cast(Recipe.tags, String)).contains(json.dumps(tag.strip().lower()), autoescape=True)
        )
    query = query.order_by(Recipe.created_at.desc(), Recipe.recipe_id)

    result = await session.execute(query.limit(limit).offset(offset))
    return list(result.scalars().all())


async def popular_recipes(session: AsyncSession, limit: int = POPULAR_LIMIT, offset: int = 0) -> List[Recipe]:
    """Highest rated first; unrated recipes last, ties broken by net votes."""
    result = await session.execute(
        select(Recipe)
        .order_by(Recipe.rating.is_(None), Recipe.rating.desc(), Recipe.votes.desc(), Recipe.created_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())


async def recipes_by_user(session: AsyncSession, user_id: int) -> List[Recipe]:
    result = await session.execute(
        select(Recipe).where(Recipe.user_id == user_id).order_by(Recipe.created_at.desc(), Recipe.recipe_id)
    )
    return list(result.scalars().all())


async def list_recipe_ingredients(session: AsyncSession, recipe_id: str) -> List[IngredientLine]:
    result = await session.execute(
        select(RecipeIngredient, Ingredient)
        .join(Ingredient, Ingredient.ingredient_id == RecipeIngredient.ingredient_id)
        .where(RecipeIngredient.recipe_id == recipe_id)
        .order_by(Ingredient.name)
    )
    return [
        IngredientLine(ingredient=ingredient, quantity=row.quantity, unit=row.unit, notes=row.notes)
        for row, ingredient in result.all()
    ]


async def get_recipe_detail(
    session: AsyncSession,
    recipe_id: str,
    user_id: Optional[int] = None,
) -> Optional[RecipeDetail]:
    """Recipe with its ingredients, vote counts and the caller's vote/save state."""
    recipe = await get_recipe(session, recipe_id)
    if not recipe:
        return None

    likes, dislikes = await vote_service.count_votes(session, recipe_id)
    detail = RecipeDetail(
        recipe=recipe,
        ingredients=await list_recipe_ingredients(session, recipe_id),
        likes=likes,
        dislikes=dislikes,
    )
    if user_id is not None:
        vote = await vote_service.get_user_vote(session, user_id, recipe_id)
        detail.user_vote = VoteType(vote.vote_type) if vote else None
        detail.is_saved = await saved_recipe_service.is_saved(session, user_id, recipe_id)
    return detail


async def _ingredient_lines(session: AsyncSession, items: Sequence[dict[str, Any]]) -> List[IngredientLine]:
    ingredients = await ingredient_service.get_ingredients_by_ids(session, [item["ingredient_id"] for item in items])
    by_id = {ingredient.ingredient_id: ingredient for ingredient in ingredients}
    missing = [item["ingredient_id"] for item in items if item["ingredient_id"] not in by_id]
    if missing:
        raise ValueError(f"Unknown ingredient ids: {', '.join(missing)}")

    lines = {}
    for item in items:
        ingredient = by_id[item["ingredient_id"]]
        lines[ingredient.ingredient_id] = IngredientLine(
            ingredient=ingredient,
            quantity=item.get("quantity") or 1.0,
            unit=item.get("unit") or ingredient.unit_of_measure or "unit",
            notes=item.get("notes"),
        )
    return list(lines.values())


async def create_complete_recipe(
    session: AsyncSession,
    user_id: Optional[int],
    recipe_data: dict[str, Any],
    ingredients: Sequence[IngredientLine],
) -> Recipe:
    """Insert a recipe and its ingredient rows in the caller's transaction."""
    values = {key: recipe_data[key] for key in EDITABLE_FIELDS if key in recipe_data}
    if isinstance(values.get("difficulty"), Difficulty):
        values["difficulty"] = values["difficulty"].value
    values.setdefault("tags", [])

    recipe = Recipe(user_id=user_id, rating=0, votes=0, **values)
    session.add(recipe)
    await session.flush()

    for line in ingredients:
        session.add(
            RecipeIngredient(
                recipe_id=recipe.recipe_id,
                ingredient_id=line.ingredient.ingredient_id,
                quantity=line.quantity,
                unit=line.unit,
                notes=line.notes,
            )
        )
    await session.flush()
    return recipe


async def create_recipe(
    session: AsyncSession,
    user_id: int,
    recipe_data: dict[str, Any],
    ingredient_items: Sequence[dict[str, Any]] = (),
) -> Recipe:
    """
    Create a recipe with its ingredients.

    Raises:
        ValueError: if an ingredient id is unknown
    """
    lines = await _ingredient_lines(session, ingredient_items)
    return await create_complete_recipe(session, user_id, recipe_data, lines)


async def _owned_recipe(session: AsyncSession, recipe_id: str, user_id: int) -> Optional[Recipe]:
    recipe = await get_recipe(session, recipe_id)
    if recipe is None:
        return None
    if recipe.user_id != user_id:
        raise RecipeAccessError("Only the recipe owner can change this recipe.")
    return recipe


async def update_recipe(
    session: AsyncSession,
    recipe_id: str,
    user_id: int,
    changes: dict[str, Any],
) -> Optional[Recipe]:
    recipe = await _owned_recipe(session, recipe_id, user_id)
    if recipe is None:
        return None

    for key, value in changes.items():
        if key not in EDITABLE_FIELDS:
            continue
        if value is None and key in REQUIRED_FIELDS:
            continue
        if isinstance(value, Difficulty):
            value = value.value
        setattr(recipe, key, value)

    await session.flush()
    return recipe


async def delete_recipe(session: AsyncSession, recipe_id: str, user_id: int) -> bool:
    """Delete an owned recipe together with its votes, saves and ingredient rows."""
    recipe = await _owned_recipe(session, recipe_id, user_id)
    if recipe is None:
        return False

    for model in (RecipeVote, SavedRecipe, RecipeIngredient):
        await session.execute(delete(model).where(model.recipe_id == recipe_id))
    await session.delete(recipe)
    await session.flush()
    return True


async def _recipe_ingredient_row(session: AsyncSession, recipe_id: str, ingredient_id: str) -> Optional[RecipeIngredient]:
    result = await session.execute(
        select(RecipeIngredient).where(
            RecipeIngredient.recipe_id == recipe_id,
            RecipeIngredient.ingredient_id == ingredient_id,
        )
    )
    return result.scalar_one_or_none()


async def add_recipe_ingredient(
    session: AsyncSession,
    recipe_id: str,
    user_id: int,
    ingredient_id: str,
    quantity: float = 1.0,
    unit: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[RecipeIngredient]:
    """
    Raises:
        ValueError: unknown ingredient, or the ingredient is already in the recipe
    """
    recipe = await _owned_recipe(session, recipe_id, user_id)
    if recipe is None:
        return None

    ingredient = await ingredient_service.get_ingredient(session, ingredient_id)
    if ingredient is None:
        raise ValueError(f"Unknown ingredient id: {ingredient_id}")
    if await _recipe_ingredient_row(session, recipe_id, ingredient_id):
        raise ValueError(f"{ingredient.name} is already part of this recipe.")

    row = RecipeIngredient(
        recipe_id=recipe_id,
        ingredient_id=ingredient_id,
        quantity=quantity,
        unit=unit or ingredient.unit_of_measure or "unit",
        notes=notes,
    )
    session.add(row)
    await session.flush()
    return row


async def update_recipe_ingredient(
    session: AsyncSession,
    recipe_id: str,
    user_id: int,
    ingredient_id: str,
    quantity: Optional[float] = None,
    unit: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[RecipeIngredient]:
    recipe = await _owned_recipe(session, recipe_id, user_id)
    if recipe is None:
        return None

    row = await _recipe_ingredient_row(session, recipe_id, ingredient_id)
    if row is None:
        return None

    if quantity is not None:
        row.quantity = quantity
    if unit is not None:
        row.unit = unit
    if notes is not None:
        row.notes = notes or None
    await session.flush()
    return row


async def remove_recipe_ingredient(session: AsyncSession, recipe_id: str, user_id: int, ingredient_id: str) -> bool:
    recipe = await _owned_recipe(session, recipe_id, user_id)
    if recipe is None:
        return False

    row = await _recipe_ingredient_row(session, recipe_id, ingredient_id)
    if row is None:
        return False

    await session.delete(row)
    await session.flush()
    return True


async def generate_recipe(
    session: AsyncSession,
    synthesizer: RecipeSynthesizer,
    ingredient_ids: Sequence[str],
    user_id: Optional[int] = None,
) -> GenerationResult:
    """
    Generate a recipe from catalogue ingredients.

    Unknown ids are skipped and duplicates dropped. The recipe is stored
    only for signed-in users.

    Raises:
        ValueError: if none of the ids name a catalogue ingredient
    """
    ingredients = await ingredient_service.get_ingredients_by_ids(session, ingredient_ids)
    if not ingredients:
        raise ValueError("No valid ingredients provided")

    names = [ingredient.name for ingredient in ingredients]
    units = {i.name: i.unit_of_measure for i in ingredients if i.unit_of_measure}
    logger.info("Generating recipe for user %s with ingredients: %s", user_id, names)

    generated = await synthesizer.synthesize(names, units)
    lines = reconcile_ingredients(ingredients, generated.ingredients)
    result = GenerationResult(generated=generated, ingredients=lines)

    if user_id is None:
        return result

    recipe_data = {
        "title": generated.title,
        "description": generated.description,
        "difficulty": generated.difficulty,
        "prep_time_minutes": generated.preparation_time,
        "cook_time_minutes": round(generated.preparation_time * COOK_TIME_RATIO),
        "servings": GENERATED_SERVINGS,
        "instructions": generated.cooking_method,
        "tags": names[:GENERATED_TAG_COUNT],
        "featured": False,
    }
    result.recipe = await create_complete_recipe(session, user_id, recipe_data, lines)
    logger.info("Stored generated recipe %s (%s)", result.recipe.recipe_id, generated.source)
    return result
