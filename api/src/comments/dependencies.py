"""FastAPI dependencies for the comment system.

Provides dependency injection for:
- Comment service
- Error handlers
"""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status

from .service import CommentError, CommentService


_comment_service_getter: Callable[[], CommentService] | None = None


def set_comment_service_getter(getter: Callable[[], CommentService]) -> None:
    """Set the comment service getter function."""
    global _comment_service_getter
    _comment_service_getter = getter


def get_comment_service() -> CommentService:
    """Get CommentService instance from app state."""
    if _comment_service_getter is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Comment service unavailable",
        )
    return _comment_service_getter()


CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]


def handle_comment_error(error: CommentError) -> HTTPException:
    """Convert comment errors to HTTP exceptions.

    Args:
        error: Comment error

    Returns:
        HTTPException with appropriate status code
    """
    status_map = {
        "comment_not_found": status.HTTP_404_NOT_FOUND,
        "post_not_found": status.HTTP_404_NOT_FOUND,
        "not_comment_author": status.HTTP_403_FORBIDDEN,
    }

    status_code = status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR)

    return HTTPException(
        status_code=status_code,
        detail=error.message,
    )
