"""Post likes.

Note: Router is not exported here to avoid circular imports.
Import directly from src.likes.router when needed.
"""

from .models import LIKES_TABLES_CQL, Like
from .service import LikeService


__all__ = [
    "LIKES_TABLES_CQL",
    "Like",
    "LikeService",
]
