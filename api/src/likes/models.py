"""Database models for post likes.

Cassandra table definitions for:
- likes: main table keyed by like id
- likes_by_post: one row per (post, user), answers "has this user liked
  this post" and lists a post's likes
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from src.auth.models import ensure_utc_aware, now_millis


LIKES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.likes (
    id UUID PRIMARY KEY,
    post_id UUID,
    user_id UUID,
    created_at TIMESTAMP
)
"""

LIKES_BY_POST_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.likes_by_post (
    post_id UUID,
    user_id UUID,
    id UUID,
    created_at TIMESTAMP,
    PRIMARY KEY ((post_id), user_id)
)
"""

LIKES_TABLES_CQL = [
    LIKES_TABLE_CQL,
    LIKES_BY_POST_TABLE_CQL,
]


class Like:
    """A user's like on a post.

    Attributes:
        id: Unique identifier
        post_id: Liked post
        user_id: User who liked it
        created_at: When the like was added
    """

    def __init__(
        self,
        post_id: UUID,
        user_id: UUID,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.post_id = post_id
        self.user_id = user_id
        self.created_at = ensure_utc_aware(created_at) or now_millis()

    @classmethod
    def from_row(cls, row: Any) -> "Like":
        """Create Like instance from a row of either like table."""
        return cls(
            id=row.id,
            post_id=row.post_id,
            user_id=row.user_id,
            created_at=row.created_at,
        )

    def __repr__(self) -> str:
        return f"<Like {self.user_id} -> {self.post_id}>"
