"""Pydantic schemas for likes."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from src.auth.schemas import AuthorSummary


class LikeResponse(BaseModel):
    """Like with populated user."""

    id: UUID
    post_id: UUID
    user: AuthorSummary | None = None
    created_at: datetime


class LikeListResponse(BaseModel):
    """Likes of a post."""

    likes: list[LikeResponse]
    total: int


class LikeMutationResponse(BaseModel):
    """Result of liking a post."""

    message: str
    like: LikeResponse
