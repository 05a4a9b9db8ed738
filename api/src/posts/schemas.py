"""Pydantic schemas for blog posts.

Request and response models for:
- Post create/update
- Populated post responses (author, tags, categories, comments)
- Paginated listing
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.auth.schemas import AuthorSummary
from src.comments.schemas import CommentResponse
from src.taxonomy.schemas import CategoryResponse, TagResponse


class CreatePostRequest(BaseModel):
    """Post creation request."""

    title: str = Field(..., min_length=1, max_length=200, description="Post title")
    content: str = Field(..., min_length=1, description="Post body")
    tags: list[str] = Field(default_factory=list, description="Tag names")
    categories: list[str] = Field(default_factory=list, description="Category names")

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Strip and reject whitespace-only values."""
        stripped = v.strip()
        if not stripped:
            raise ValueError("must not be blank")
        return stripped


class UpdatePostRequest(BaseModel):
    """Post update request.

    Empty title/content keep the current values. Tags and categories are
    replaced whenever they are present, an empty list clears them.
    """

    title: str | None = Field(None, max_length=200, description="Post title")
    content: str | None = Field(None, description="Post body")
    tags: list[str] | None = Field(None, description="Tag names")
    categories: list[str] | None = Field(None, description="Category names")


class PostResponse(BaseModel):
    """Populated post."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    content: str
    author: AuthorSummary | None = None
    tags: list[TagResponse] = Field(default_factory=list)
    categories: list[CategoryResponse] = Field(default_factory=list)
    comments: list[CommentResponse] = Field(default_factory=list)
    like_ids: list[UUID] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class PostDetailResponse(PostResponse):
    """Populated post with its like count."""

    like_count: int = 0
    liked_by_me: bool = False


class PostListResponse(BaseModel):
    """One page of posts."""

    posts: list[PostResponse]
    total_pages: int
    current_page: int
    total: int


class PostMutationResponse(BaseModel):
    """Result of a create or update."""

    message: str
    post: PostResponse
