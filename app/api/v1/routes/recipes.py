"""Recipe routes - browsing, generation, voting and saving"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.dependencies import get_synthesizer, optional_authentication, require_authentication
from app.api.v1.schemas.common import ApiResponse
from app.api.v1.schemas.recipe import (
    GeneratedRecipeResponse,
    GenerateRecipeRequest,
    RecipeCreateRequest,
    RecipeDetailResponse,
    RecipeIngredientInput,
    RecipeIngredientResponse,
    RecipeIngredientUpdateRequest,
    RecipeSummary,
    RecipeUpdateRequest,
)
from app.api.v1.schemas.vote import SaveResponse, VoteRequest, VoteResponse
from app.core.enums import Difficulty
from app.db.session import get_session
from app.services import recipe_service, saved_recipe_service, vote_service
from app.services.recipe_service import POPULAR_LIMIT, RecipeAccessError
from app.services.recipe_synthesizer import RecipeSynthesizer

logger = logging.getLogger(__name__)

router = APIRouter()


def _summaries(recipes) -> List[RecipeSummary]:
    return [RecipeSummary.model_validate(recipe) for recipe in recipes]


async def _detail_response(session: AsyncSession, recipe_id: str, user_id: Optional[int]) -> RecipeDetailResponse:
    detail = await recipe_service.get_recipe_detail(session, recipe_id, user_id)
    if not detail:
        raise HTTPException(status_code=404, detail="Recipe not found.")
    return RecipeDetailResponse.from_detail(detail)


@router.get("", response_model=ApiResponse[List[RecipeSummary]])
async def list_recipes(
    search: Optional[str] = Query(None, description="Search in titles"),
    tag: Optional[str] = Query(None, description="Recipes carrying this tag"),
    featured: Optional[bool] = Query(None),
    difficulty: Optional[Difficulty] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[List[RecipeSummary]]:
    recipes = await recipe_service.list_recipes(
        session,
        search=search,
        tag=tag,
        featured=featured,
        difficulty=difficulty,
        limit=limit,
        offset=offset,
    )
    return ApiResponse(success=True, data=_summaries(recipes))


@router.get("/popular", response_model=ApiResponse[List[RecipeSummary]])
async def popular_recipes(
    limit: int = Query(POPULAR_LIMIT, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[List[RecipeSummary]]:
    """Highest rated recipes; unrated ones come last."""
    recipes = await recipe_service.popular_recipes(session, limit=limit, offset=offset)
    return ApiResponse(success=True, data=_summaries(recipes))


@router.get("/mine", response_model=ApiResponse[List[RecipeSummary]])
async def my_recipes(
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[List[RecipeSummary]]:
    recipes = await recipe_service.recipes_by_user(session, user_id)
    return ApiResponse(success=True, data=_summaries(recipes))


@router.get("/saved", response_model=ApiResponse[List[RecipeSummary]])
async def my_saved_recipes(
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[List[RecipeSummary]]:
    recipes = await saved_recipe_service.saved_recipes(session, user_id)
    return ApiResponse(success=True, data=_summaries(recipes))


@router.post("/generate", response_model=ApiResponse[GeneratedRecipeResponse])
async def generate_recipe(
    payload: GenerateRecipeRequest,
    user_id: Optional[int] = Depends(optional_authentication),
    synthesizer: RecipeSynthesizer = Depends(get_synthesizer),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[GeneratedRecipeResponse]:
    """
    Generate a recipe from catalogue ingredients.

    Signed-in users get the recipe stored under their account; anonymous
    callers receive it in the response only. Generation itself always
    succeeds: when the language model is unavailable a rule-based recipe
    is returned.
    """
    try:
        result = await recipe_service.generate_recipe(session, synthesizer, payload.ingredient_ids, user_id)
        if result.recipe is not None:
            await session.commit()
    except ValueError as e:
        await session.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        await session.rollback()
        logger.exception("Recipe generation failed")
        raise HTTPException(status_code=500, detail=f"Recipe generation failed: {str(e)}")

    message = "Recipe generated and saved." if result.recipe is not None else "Recipe generated."
    return ApiResponse(success=True, data=GeneratedRecipeResponse.from_result(result), message=message)


@router.post("", response_model=ApiResponse[RecipeDetailResponse], status_code=status.HTTP_201_CREATED)
async def create_recipe(
    payload: RecipeCreateRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[RecipeDetailResponse]:
    """Create a recipe and its ingredient rows in one transaction."""
    try:
        recipe = await recipe_service.create_recipe(
            session,
            user_id,
            payload.model_dump(exclude={"ingredients"}),
            [item.model_dump() for item in payload.ingredients],
        )
        await session.commit()
    except ValueError as e:
        await session.rollback()
        raise HTTPException(status_code=400, detail=str(e))

    return ApiResponse(success=True, data=await _detail_response(session, recipe.recipe_id, user_id))


@router.get("/{recipe_id}", response_model=ApiResponse[RecipeDetailResponse])
async def get_recipe(
    recipe_id: str,
    user_id: Optional[int] = Depends(optional_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[RecipeDetailResponse]:
    return ApiResponse(success=True, data=await _detail_response(session, recipe_id, user_id))


@router.put("/{recipe_id}", response_model=ApiResponse[RecipeDetailResponse])
async def update_recipe(
    recipe_id: str,
    payload: RecipeUpdateRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[RecipeDetailResponse]:
    try:
        recipe = await recipe_service.update_recipe(session, recipe_id, user_id, payload.model_dump(exclude_unset=True))
    except RecipeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not recipe:
        raise HTTPException(status_code=404, detail="Recipe not found.")

    await session.commit()
    return ApiResponse(success=True, data=await _detail_response(session, recipe_id, user_id))


@router.delete("/{recipe_id}", response_model=ApiResponse[None])
async def delete_recipe(
    recipe_id: str,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[None]:
    try:
        deleted = await recipe_service.delete_recipe(session, recipe_id, user_id)
    except RecipeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not deleted:
        raise HTTPException(status_code=404, detail="Recipe not found.")

    await session.commit()
    logger.info("User %s deleted recipe %s", user_id, recipe_id)
    return ApiResponse(success=True, message="Recipe deleted.")


@router.post("/{recipe_id}/vote", response_model=ApiResponse[VoteResponse])
async def vote_recipe(
    recipe_id: str,
    payload: VoteRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[VoteResponse]:
    """
    Like, dislike or unvote.

    Sending the vote you already have removes it; sending the other type
    switches it. The recipe's votes and rating are recomputed before the
    response is returned.
    """
    try:
        summary = await vote_service.cast_vote(session, user_id, recipe_id, payload.action)
        if summary is None:
            raise HTTPException(status_code=404, detail="Recipe not found.")
        await session.commit()
    except HTTPException:
        await session.rollback()
        raise
    except Exception as e:
        await session.rollback()
        logger.exception("Voting on recipe %s failed", recipe_id)
        raise HTTPException(status_code=500, detail=f"Vote failed: {str(e)}")

    return ApiResponse(success=True, data=VoteResponse.model_validate(summary))


@router.get("/{recipe_id}/votes", response_model=ApiResponse[VoteResponse])
async def get_recipe_votes(
    recipe_id: str,
    user_id: Optional[int] = Depends(optional_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[VoteResponse]:
    summary = await vote_service.recipe_votes(session, recipe_id, user_id)
    if summary is None:
        raise HTTPException(status_code=404, detail="Recipe not found.")
    return ApiResponse(success=True, data=VoteResponse.model_validate(summary))


@router.post("/{recipe_id}/save", response_model=ApiResponse[SaveResponse])
async def toggle_save_recipe(
    recipe_id: str,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[SaveResponse]:
    """Save the recipe, or remove it from saved recipes if already saved."""
    try:
        saved = await saved_recipe_service.toggle_save(session, user_id, recipe_id)
        if saved is not None:
            await session.commit()
    except IntegrityError:
        # a concurrent request saved it first
        await session.rollback()
        logger.warning("Recipe %s was already saved by user %s", recipe_id, user_id)
        saved = await saved_recipe_service.is_saved(session, user_id, recipe_id)
    if saved is None:
        raise HTTPException(status_code=404, detail="Recipe not found.")
    return ApiResponse(
        success=True,
        data=SaveResponse(recipe_id=recipe_id, saved=saved),
        message="Recipe saved." if saved else "Recipe removed from saved recipes.",
    )


@router.get("/{recipe_id}/ingredients", response_model=ApiResponse[List[RecipeIngredientResponse]])
async def list_recipe_ingredients(
    recipe_id: str,
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[List[RecipeIngredientResponse]]:
    if not await recipe_service.get_recipe(session, recipe_id):
        raise HTTPException(status_code=404, detail="Recipe not found.")
    lines = await recipe_service.list_recipe_ingredients(session, recipe_id)
    return ApiResponse(success=True, data=[RecipeIngredientResponse.from_line(line) for line in lines])


@router.post(
    "/{recipe_id}/ingredients",
    response_model=ApiResponse[RecipeDetailResponse],
    status_code=status.HTTP_201_CREATED,
)
async def add_recipe_ingredient(
    recipe_id: str,
    payload: RecipeIngredientInput,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[RecipeDetailResponse]:
    try:
        row = await recipe_service.add_recipe_ingredient(
            session,
            recipe_id,
            user_id,
            payload.ingredient_id,
            quantity=payload.quantity,
            unit=payload.unit,
            notes=payload.notes,
        )
    except RecipeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    except ValueError as e:
        await session.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    if not row:
        raise HTTPException(status_code=404, detail="Recipe not found.")

    await session.commit()
    return ApiResponse(success=True, data=await _detail_response(session, recipe_id, user_id))


@router.put("/{recipe_id}/ingredients/{ingredient_id}", response_model=ApiResponse[RecipeDetailResponse])
async def update_recipe_ingredient(
    recipe_id: str,
    ingredient_id: str,
    payload: RecipeIngredientUpdateRequest,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[RecipeDetailResponse]:
    try:
        row = await recipe_service.update_recipe_ingredient(
            session,
            recipe_id,
            user_id,
            ingredient_id,
            quantity=payload.quantity,
            unit=payload.unit,
            notes=payload.notes,
        )
    except RecipeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not row:
        raise HTTPException(status_code=404, detail="Recipe ingredient not found.")

    await session.commit()
    return ApiResponse(success=True, data=await _detail_response(session, recipe_id, user_id))


@router.delete("/{recipe_id}/ingredients/{ingredient_id}", response_model=ApiResponse[None])
async def remove_recipe_ingredient(
    recipe_id: str,
    ingredient_id: str,
    user_id: int = Depends(require_authentication),
    session: AsyncSession = Depends(get_session),
) -> ApiResponse[None]:
    try:
        removed = await recipe_service.remove_recipe_ingredient(session, recipe_id, user_id, ingredient_id)
    except RecipeAccessError as e:
        raise HTTPException(status_code=403, detail=str(e))
    if not removed:
        raise HTTPException(status_code=404, detail="Recipe ingredient not found.")

    await session.commit()
    return ApiResponse(success=True, message="Ingredient removed from recipe.")
