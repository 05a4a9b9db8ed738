"""Comment system module.

Provides post comments with:
- Author-populated listing, newest first
- Author-only edit and delete
- comment_ids bookkeeping on the parent post

Note: Router is not exported here to avoid circular imports.
Import directly from src.comments.router when needed.
"""

from .models import COMMENTS_TABLES_CQL, Comment
from .service import CommentService


__all__ = [
    "COMMENTS_TABLES_CQL",
    "Comment",
    "CommentService",
]
