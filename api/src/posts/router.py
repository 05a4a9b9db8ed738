"""Blog post API endpoints.

Provides routes for:
- Paginated listing
- Post detail with like count
- Author-only create, update and delete
"""

import math
from uuid import UUID

from fastapi import APIRouter, Query, status

from src.auth.dependencies import CurrentUser, OptionalUser
from src.auth.schemas import MessageResponse
from src.config import get_settings
from src.posts.dependencies import PostServiceDep, handle_post_error
from src.posts.schemas import (
    CreatePostRequest,
    PostDetailResponse,
    PostListResponse,
    PostMutationResponse,
    UpdatePostRequest,
)
from src.posts.service import PostError, PostNotFoundError


router = APIRouter(prefix="/v1/posts", tags=["posts"])


@router.get(
    "",
    response_model=PostListResponse,
    summary="List posts",
)
async def list_posts(
    post_service: PostServiceDep,
    page: int = Query(1, ge=1, description="Page number, starting at 1"),
    results_per_page: int | None = Query(None, ge=1, description="Page size"),
) -> PostListResponse:
    """List posts, newest first, with author, tags, categories and comments."""
    settings = get_settings()
    per_page = min(
        results_per_page or settings.posts_default_page_size,
        settings.posts_max_page_size,
    )

    posts, total = post_service.list_posts(page, per_page)
    return PostListResponse(
        posts=post_service.to_responses(posts),
        total_pages=math.ceil(total / per_page),
        current_page=page,
        total=total,
    )


@router.post(
    "",
    response_model=PostMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create post",
)
async def create_post(
    data: CreatePostRequest,
    post_service: PostServiceDep,
    user: CurrentUser,
) -> PostMutationResponse:
    """Create a post authored by the current user.

    Unknown tag and category names are created on the fly.
    """
    post = post_service.create_post(data, user.id)
    return PostMutationResponse(
        message="Post created successfully",
        post=post_service.to_response(post),
    )


@router.get(
    "/{post_id}",
    response_model=PostDetailResponse,
    summary="Get post",
    responses={404: {"description": "Post not found"}},
)
async def get_post(
    post_id: UUID,
    post_service: PostServiceDep,
    user: OptionalUser,
) -> PostDetailResponse:
    """Get a populated post with its like count.

    Signed-in callers also learn whether they liked it.
    """
    post = post_service.get_post(post_id)
    if not post:
        raise handle_post_error(PostNotFoundError())
    return post_service.to_detail_response(post, user.id if user else None)


@router.put(
    "/{post_id}",
    response_model=PostMutationResponse,
    summary="Update post",
    responses={
        403: {"description": "Not the post author"},
        404: {"description": "Post not found"},
    },
)
async def update_post(
    post_id: UUID,
    data: UpdatePostRequest,
    post_service: PostServiceDep,
    user: CurrentUser,
) -> PostMutationResponse:
    """Update your own post."""
    try:
        post = post_service.update_post(post_id, data, user.id)
    except PostError as e:
        raise handle_post_error(e) from e

    return PostMutationResponse(
        message="Post updated successfully",
        post=post_service.to_response(post),
    )


@router.delete(
    "/{post_id}",
    response_model=MessageResponse,
    summary="Delete post",
    responses={
        403: {"description": "Not the post author"},
        404: {"description": "Post not found"},
    },
)
async def delete_post(
    post_id: UUID,
    post_service: PostServiceDep,
    user: CurrentUser,
) -> MessageResponse:
    """Delete your own post with its likes and comments."""
    try:
        post_service.delete_post(post_id, user.id)
    except PostError as e:
        raise handle_post_error(e) from e

    return MessageResponse(message=f"Post with id:{post_id} deleted successfully")
