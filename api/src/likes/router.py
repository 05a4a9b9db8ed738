"""Like API endpoints."""

from uuid import UUID

from fastapi import APIRouter, status

from src.auth.dependencies import CurrentUser
from src.auth.schemas import MessageResponse

from .dependencies import LikeServiceDep, handle_like_error
from .schemas import LikeListResponse, LikeMutationResponse
from .service import LikeError


router = APIRouter(prefix="/v1/likes", tags=["likes"])


@router.post(
    "/post/{post_id}",
    response_model=LikeMutationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Like a post",
    responses={
        400: {"description": "Already liked"},
        404: {"description": "Post not found"},
    },
)
async def add_like(
    post_id: UUID,
    like_service: LikeServiceDep,
    user: CurrentUser,
) -> LikeMutationResponse:
    """Like a post as the current user."""
    try:
        like = like_service.add_like(post_id, user.id)
    except LikeError as e:
        raise handle_like_error(e) from e

    return LikeMutationResponse(
        message="Post Liked Successfully",
        like=like_service.to_response(like),
    )


@router.delete(
    "/post/{post_id}",
    response_model=MessageResponse,
    summary="Remove like",
    responses={
        403: {"description": "Not the like owner"},
        404: {"description": "Like not found"},
    },
)
async def remove_like(
    post_id: UUID,
    like_service: LikeServiceDep,
    user: CurrentUser,
) -> MessageResponse:
    """Remove the current user's like from a post."""
    try:
        like_service.remove_like(post_id, user.id)
    except LikeError as e:
        raise handle_like_error(e) from e

    return MessageResponse(message="Like removed successfully.")


@router.get(
    "/post/{post_id}",
    response_model=LikeListResponse,
    summary="List likes of a post",
)
async def list_likes(
    post_id: UUID,
    like_service: LikeServiceDep,
) -> LikeListResponse:
    """Likes of a post with the name and email of each user."""
    likes = like_service.to_responses(like_service.list_likes(post_id))
    return LikeListResponse(likes=likes, total=len(likes))
