"""Persisting recipe votes and the cached rating."""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.enums import VoteAction, VoteType
from app.db.models import Recipe, RecipeVote
from app.services.vote_aggregator import recompute, vote_transition

logger = logging.getLogger(__name__)


@dataclass
class VoteSummary:
    recipe_id: str
    likes: int
    dislikes: int
    votes: int
    rating: int
    user_vote: Optional[VoteType]


async def count_votes(session: AsyncSession, recipe_id: str) -> tuple[int, int]:
    """(likes, dislikes) for a recipe, read from the vote table."""
    result = await session.execute(
        select(RecipeVote.vote_type, func.count(RecipeVote.vote_id))
        .where(RecipeVote.recipe_id == recipe_id)
        .group_by(RecipeVote.vote_type)
    )
    counts = {vote_type: count for vote_type, count in result.all()}
    return counts.get(VoteType.LIKE.value, 0), counts.get(VoteType.DISLIKE.value, 0)


async def get_user_vote(session: AsyncSession, user_id: int, recipe_id: str) -> RecipeVote | None:
    result = await session.execute(
        select(RecipeVote).where(RecipeVote.user_id == user_id, RecipeVote.recipe_id == recipe_id)
    )
    return result.scalar_one_or_none()


async def cast_vote(
    session: AsyncSession,
    user_id: int,
    recipe_id: str,
    action: VoteAction,
) -> VoteSummary | None:
    """
    Apply a like/dislike/unvote from a user and refresh the recipe's rating.

    The recipe row is locked for the rest of the transaction, so concurrent
    voters on the same recipe are serialized and the counts read back below
    already include this vote. The caller commits.

    Returns:
        VoteSummary, or None when the recipe does not exist
    """
    result = await session.execute(
        select(Recipe).where(Recipe.recipe_id == recipe_id).with_for_update()
    )
    recipe = result.scalar_one_or_none()
    if recipe is None:
        return None

    existing = await get_user_vote(session, user_id, recipe_id)
    current = VoteType(existing.vote_type) if existing else None
    transition = vote_transition(current, action)

    if transition.new_vote is None:
        if existing is not None:
            await session.delete(existing)
    elif existing is None:
        session.add(RecipeVote(user_id=user_id, recipe_id=recipe_id, vote_type=transition.new_vote.value))
    else:
        existing.vote_type = transition.new_vote.value
    await session.flush()

    likes, dislikes = await count_votes(session, recipe_id)
    tally = recompute(likes, dislikes)
    recipe.votes = tally.votes
    recipe.rating = tally.rating
    await session.flush()

    logger.info(
        "Vote %s by user %s on recipe %s: %s -> %s (likes=%d, dislikes=%d, rating=%d)",
        action.value,
        user_id,
        recipe_id,
        current.value if current else None,
        transition.new_vote.value if transition.new_vote else None,
        likes,
        dislikes,
        tally.rating,
    )

    return VoteSummary(
        recipe_id=recipe_id,
        likes=likes,
        dislikes=dislikes,
        votes=tally.votes,
        rating=tally.rating,
        user_vote=transition.new_vote,
    )


async def recipe_votes(
    session: AsyncSession,
    recipe_id: str,
    user_id: int | None = None,
) -> VoteSummary | None:
    """Current like/dislike counts and, for a signed-in user, their vote."""
    recipe = await session.get(Recipe, recipe_id)
    if recipe is None:
        return None

    likes, dislikes = await count_votes(session, recipe_id)
    user_vote = None
    if user_id is not None:
        existing = await get_user_vote(session, user_id, recipe_id)
        user_vote = VoteType(existing.vote_type) if existing else None

    return VoteSummary(
        recipe_id=recipe_id,
        likes=likes,
        dislikes=dislikes,
        votes=likes - dislikes,
        rating=recipe.rating or 0,
        user_vote=user_vote,
    )
