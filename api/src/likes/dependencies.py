"""FastAPI dependencies for likes."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status

from .service import LikeError, LikeService


_like_service_getter: Callable[[], LikeService] | None = None


def set_like_service_getter(getter: Callable[[], LikeService]) -> None:
    """Set the like service getter function."""
    global _like_service_getter
    _like_service_getter = getter


def get_like_service() -> LikeService:
    """Get LikeService instance from app state."""
    if _like_service_getter is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Like service unavailable",
        )
    return _like_service_getter()


LikeServiceDep = Annotated[LikeService, Depends(get_like_service)]


def handle_like_error(error: LikeError) -> HTTPException:
    """Convert like errors to HTTP exceptions."""
    status_map = {
        "post_not_found": status.HTTP_404_NOT_FOUND,
        "like_not_found": status.HTTP_404_NOT_FOUND,
        "already_liked": status.HTTP_400_BAD_REQUEST,
        "not_like_owner": status.HTTP_403_FORBIDDEN,
    }

    return HTTPException(
        status_code=status_map.get(error.code, status.HTTP_500_INTERNAL_SERVER_ERROR),
        detail=error.message,
    )
