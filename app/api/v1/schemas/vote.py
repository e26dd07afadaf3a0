"""Vote and save schemas"""
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import VoteAction, VoteType


class VoteRequest(BaseModel):
    action: VoteAction = Field(..., description="like, dislike or unvote; repeating your vote removes it")


class VoteResponse(BaseModel):
    recipe_id: str
    likes: int
    dislikes: int
    votes: int = Field(..., description="likes - dislikes")
    rating: int = Field(..., ge=0, le=10)
    user_vote: Optional[VoteType] = None

    model_config = {"from_attributes": True}


class SaveResponse(BaseModel):
    recipe_id: str
    saved: bool
