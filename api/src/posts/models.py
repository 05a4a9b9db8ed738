"""Database models for blog posts.

A post keeps denormalized id lists of its tags, categories, comments and
likes. The lists are maintained with CQL collection appends/removals by
the services that own those records.
"""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from src.auth.models import ensure_utc_aware, now_millis


POSTS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.posts (
    id UUID PRIMARY KEY,
    title TEXT,
    content TEXT,
    author_id UUID,
    tag_ids LIST<UUID>,
    category_ids LIST<UUID>,
    comment_ids LIST<UUID>,
    like_ids LIST<UUID>,
    created_at TIMESTAMP,
    updated_at TIMESTAMP
)
"""

POSTS_TABLES_CQL = [
    POSTS_TABLE_CQL,
]


class Post:
    """Blog article.

    Attributes:
        id: Unique identifier
        title: Post title
        content: Post body
        author_id: User who wrote the post
        tag_ids: Referenced tags, in the order they were given
        category_ids: Referenced categories, in the order they were given
        comment_ids: Comments attached to this post
        like_ids: Likes attached to this post
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    def __init__(
        self,
        title: str,
        content: str,
        author_id: UUID,
        id: UUID | None = None,
        tag_ids: list[UUID] | None = None,
        category_ids: list[UUID] | None = None,
        comment_ids: list[UUID] | None = None,
        like_ids: list[UUID] | None = None,
        created_at: datetime | None = None,
        updated_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.title = title
        self.content = content
        self.author_id = author_id
        # Cassandra returns None for empty collections
        self.tag_ids = list(tag_ids or [])
        self.category_ids = list(category_ids or [])
        self.comment_ids = list(comment_ids or [])
        self.like_ids = list(like_ids or [])
        self.created_at = ensure_utc_aware(created_at) or now_millis()
        self.updated_at = ensure_utc_aware(updated_at) or self.created_at

    @classmethod
    def from_row(cls, row: Any) -> "Post":
        """Create Post instance from Cassandra row."""
        return cls(
            id=row.id,
            title=row.title,
            content=row.content,
            author_id=row.author_id,
            tag_ids=row.tag_ids,
            category_ids=row.category_ids,
            comment_ids=row.comment_ids,
            like_ids=row.like_ids,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    def is_author(self, user_id: UUID) -> bool:
        """Check whether ``user_id`` wrote this post."""
        return self.author_id == user_id

    def __repr__(self) -> str:
        return f"<Post {self.id} '{self.title}'>"
