"""Blog posts.

Note: Router is not exported here to avoid circular imports.
Import directly from src.posts.router when needed.
"""

from .models import POSTS_TABLES_CQL, Post
from .service import PostService


__all__ = [
    "POSTS_TABLES_CQL",
    "Post",
    "PostService",
]
