"""Database models for post comments.

Cassandra table definitions for:
- comments: main table keyed by comment id
- comments_by_post: per-post listing, newest first
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from src.auth.models import ensure_utc_aware, now_millis


COMMENTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments (
    id UUID PRIMARY KEY,
    post_id UUID,
    author_id UUID,
    content TEXT,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

COMMENTS_BY_POST_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.comments_by_post (
    post_id UUID,
    created_at TIMESTAMP,
    id UUID,
    author_id UUID,
    content TEXT,
    updated_at TIMESTAMP,
    PRIMARY KEY ((post_id), created_at, id)
) WITH CLUSTERING ORDER BY (created_at DESC, id ASC)
"""

COMMENTS_TABLES_CQL = [
    COMMENTS_TABLE_CQL,
    COMMENTS_BY_POST_TABLE_CQL,
]


class Comment:
    """Comment on a post.

    Attributes:
        id: Unique identifier
        post_id: Post the comment belongs to
        author_id: User who wrote the comment
        content: Comment text
        created_at: Creation timestamp
        updated_at: Last edit timestamp
    """

    def __init__(
        self,
        post_id: UUID,
        author_id: UUID,
        content: str,
        id: UUID | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.post_id = post_id
        self.author_id = author_id
        self.content = content
        self.created_at = ensure_utc_aware(created_at) or now_millis()
        self.updated_at = ensure_utc_aware(updated_at) or self.created_at

    @classmethod
    def from_row(cls, row: Any) -> "Comment":
        """Create Comment instance from a row of either comment table."""
        return cls(
            id=row.id,
            post_id=row.post_id,
            author_id=row.author_id,
            content=row.content,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def is_author(self, user_id: UUID) -> bool:
        """Check whether ``user_id`` wrote this comment."""
        return self.author_id == user_id

    def __repr__(self) -> str:
        return f"<Comment {self.id} on {self.post_id}>"
