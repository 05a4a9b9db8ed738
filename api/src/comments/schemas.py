"""Pydantic schemas for the comment system."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.auth.schemas import AuthorSummary


class CreateCommentRequest(BaseModel):
    """New comment on a post."""

    content: str = Field(..., max_length=5000, description="Comment text")

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        """Strip the text and reject blank comments."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("Comment cannot be empty")
        return stripped


class UpdateCommentRequest(BaseModel):
    """Comment edit. Blank or missing content keeps the current text."""

    content: str | None = Field(None, max_length=5000, description="New text")


class CommentResponse(BaseModel):
    """Comment with populated author."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    post_id: UUID
    author: AuthorSummary | None = None
    content: str
    created_at: datetime
    updated_at: datetime


class CommentListResponse(BaseModel):
    """Comments of a post, newest first."""

    comments: list[CommentResponse]
    total: int


class CommentMutationResponse(BaseModel):
    """Result of a create, edit or delete."""

    message: str
    comment: CommentResponse
