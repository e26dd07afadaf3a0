"""Vote toggling and the smoothed 0-10 recipe rating.

Pure functions only; `vote_service` applies them inside a transaction.
"""
from dataclasses import dataclass
from typing import Optional

from app.core.enums import VoteAction, VoteType

CONFIDENCE_WEIGHT = 10
PRIOR_MEAN = 5
MAX_RATING = 10


@dataclass(frozen=True)
class VoteTally:
    votes: int
    rating: int


@dataclass(frozen=True)
class VoteTransition:
    new_vote: Optional[VoteType]
    like_delta: int
    dislike_delta: int


def apply_vote(current: Optional[VoteType], requested: VoteAction) -> Optional[VoteType]:
    """Vote a user holds after `requested`.

    Repeating the current vote removes it, unvote clears it, and the other
    vote type replaces it.
    """
    if requested == VoteAction.UNVOTE:
        return None
    requested_type = VoteType(requested.value)
    if current == requested_type:
        return None
    return requested_type


def _count(vote: Optional[VoteType], vote_type: VoteType) -> int:
    return 1 if vote == vote_type else 0


def vote_transition(current: Optional[VoteType], requested: VoteAction) -> VoteTransition:
    new_vote = apply_vote(current, requested)
    return VoteTransition(
        new_vote=new_vote,
        like_delta=_count(new_vote, VoteType.LIKE) - _count(current, VoteType.LIKE),
        dislike_delta=_count(new_vote, VoteType.DISLIKE) - _count(current, VoteType.DISLIKE),
    )


def recompute(likes: int, dislikes: int) -> VoteTally:
    """Net votes and Bayesian-smoothed rating for the given counts.

    rating = round((10 * L + PRIOR_MEAN * C) / (L + D + C)), rounded half up
    and clamped to [0, 10]; zero votes give a rating of 0.
    """
    if likes < 0 or dislikes < 0:
        raise ValueError(f"Vote counts must be non-negative, got likes={likes}, dislikes={dislikes}")

    total = likes + dislikes
    if total == 0:
        return VoteTally(votes=0, rating=0)

    numerator = MAX_RATING * likes + PRIOR_MEAN * CONFIDENCE_WEIGHT
    denominator = total + CONFIDENCE_WEIGHT
    rating = (2 * numerator + denominator) // (2 * denominator)
    return VoteTally(votes=likes - dislikes, rating=max(0, min(MAX_RATING, rating)))
