"""Comment system API endpoints.

Provides routes for:
- Listing the comments of a post
- Comment create, read, edit and delete
"""

from uuid import UUID

import structlog
from fastapi import APIRouter, status

from src.auth.dependencies import CurrentUser

from .dependencies import CommentServiceDep, handle_comment_error
from .schemas import (
    CommentListResponse,
    CommentMutationResponse,
    CommentResponse,
    CreateCommentRequest,
    UpdateCommentRequest,
)
from .service import CommentError, CommentNotFoundError


logger = structlog.get_logger(__name__)


router = APIRouter(prefix="/v1/comments", tags=["comments"])


@router.get(
    "/post/{post_id}",
    response_model=CommentListResponse,
    summary="List comments of a post",
)
async def list_comments(
    post_id: UUID,
    comment_service: CommentServiceDep,
) -> CommentListResponse:
    """All comments of a post with their authors, newest first."""
    comments = comment_service.to_responses(comment_service.list_comments(post_id))
    return CommentListResponse(comments=comments, total=len(comments))


@router.post(
    "/post/{post_id}",
    response_model=CommentMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create comment",
    responses={404: {"description": "Post not found"}},
)
async def create_comment(
    post_id: UUID,
    data: CreateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentMutationResponse:
    """Comment on a post as the current user."""
    try:
        comment = comment_service.create_comment(post_id, user.id, data.content)
    except CommentError as e:
        raise handle_comment_error(e) from e

    return CommentMutationResponse(
        message="Comment created successfully",
        comment=comment_service.to_response(comment),
    )


@router.get(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Get comment",
    responses={404: {"description": "Comment not found"}},
)
async def get_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
) -> CommentResponse:
    """Get a single comment with its author."""
    comment = comment_service.get_comment(comment_id)
    if not comment:
        raise handle_comment_error(CommentNotFoundError())
    return comment_service.to_response(comment)


@router.put(
    "/{comment_id}",
    response_model=CommentMutationResponse,
    summary="Edit comment",
    responses={
        403: {"description": "Not the comment author"},
        404: {"description": "Comment not found"},
    },
)
async def edit_comment(
    comment_id: UUID,
    data: UpdateCommentRequest,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentMutationResponse:
    """Edit your own comment."""
    try:
        comment = comment_service.edit_comment(comment_id, user.id, data.content)
    except CommentError as e:
        raise handle_comment_error(e) from e

    return CommentMutationResponse(
        message="Comment updated successfully",
        comment=comment_service.to_response(comment),
    )


@router.delete(
    "/{comment_id}",
    response_model=CommentMutationResponse,
    summary="Delete comment",
    responses={
        403: {"description": "Not the comment author"},
        404: {"description": "Comment not found"},
    },
)
async def delete_comment(
    comment_id: UUID,
    comment_service: CommentServiceDep,
    user: CurrentUser,
) -> CommentMutationResponse:
    """Delete your own comment."""
    try:
        comment = comment_service.delete_comment(comment_id, user.id)
    except CommentError as e:
        raise handle_comment_error(e) from e

    return CommentMutationResponse(
        message="Comment deleted successfully",
        comment=comment_service.to_response(comment),
    )
