"""FastAPI dependencies for blog posts."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status

from src.posts.service import PostError, PostService


_post_service_getter: Callable[[], PostService] | None = None


def set_post_service_getter(getter: Callable[[], PostService]) -> None:
    """Set the post service getter function."""
    global _post_service_getter
    _post_service_getter = getter


def get_post_service() -> PostService:
    """Get PostService instance from app state."""
    if _post_service_getter is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Post service unavailable",
        )
    return _post_service_getter()


PostServiceDep = Annotated[PostService, Depends(get_post_service)]


def handle_post_error(error: PostError) -> HTTPException:
    """Convert PostError to HTTPException."""
    status_map = {
        "post_not_found": status.HTTP_404_NOT_FOUND,
        "not_post_author": status.HTTP_403_FORBIDDEN,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_400_BAD_REQUEST),
        detail=error.message,
    )
