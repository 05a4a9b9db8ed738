"""Like service layer.

Business logic for:
- One like per (user, post)
- Owner-only removal
- Keeping the post's like_ids list in step with the like tables
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .models import Like
from .schemas import LikeResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from src.auth.service import AuthService


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class LikeError(Exception):
    """Base like error."""

    def __init__(self, message: str, code: str = "like_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class LikePostNotFoundError(LikeError):
    """Target post does not exist."""

    def __init__(self, message: str = "Post not found."):
        super().__init__(message, "post_not_found")


class LikeNotFoundError(LikeError):
    """User has no like on the post."""

    def __init__(self, message: str = "Like Not Found"):
        super().__init__(message, "like_not_found")


class AlreadyLikedError(LikeError):
    """User already liked the post."""

    def __init__(self, message: str = "You have already liked this post."):
        super().__init__(message, "already_liked")


class NotLikeOwnerError(LikeError):
    """Like belongs to another user."""

    def __init__(self, message: str = "You are not authorized to remove this like."):
        super().__init__(message, "not_like_owner")


# ==============================================================================
# Like Service
# ==============================================================================


class LikeService:
    """Service for post likes."""

    def __init__(self, session: "Session", keyspace: str, auth_service: "AuthService"):
        """Initialize with Cassandra session and the user resolver."""
        self.session = session
        self.keyspace = keyspace
        self.auth_service = auth_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient queries."""
        # Post bookkeeping
        self._get_post = self.session.prepare(
            f"SELECT id FROM {self.keyspace}.posts WHERE id = ?"
        )
        self._append_post_like = self.session.prepare(
            f"UPDATE {self.keyspace}.posts SET like_ids = like_ids + ? WHERE id = ?"
        )
        self._remove_post_like = self.session.prepare(
            f"UPDATE {self.keyspace}.posts SET like_ids = like_ids - ? WHERE id = ?"
        )

        # Likes
        self._insert_like = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.likes (id, post_id, user_id, created_at)
            VALUES (?, ?, ?, ?)
        """)
        self._insert_like_by_post = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.likes_by_post (post_id, user_id, id, created_at)
            VALUES (?, ?, ?, ?)
        """)
        self._get_user_like = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.likes_by_post
            WHERE post_id = ? AND user_id = ?
        """)
        self._get_likes_by_post = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.likes_by_post WHERE post_id = ?"
        )
        self._count_likes = self.session.prepare(
            f"SELECT COUNT(*) FROM {self.keyspace}.likes_by_post WHERE post_id = ?"
        )
        self._delete_like = self.session.prepare(
            f"DELETE FROM {self.keyspace}.likes WHERE id = ?"
        )
        self._delete_like_by_post = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.likes_by_post
            WHERE post_id = ? AND user_id = ?
        """)
        self._delete_post_partition = self.session.prepare(
            f"DELETE FROM {self.keyspace}.likes_by_post WHERE post_id = ?"
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_user_like(self, post_id: UUID, user_id: UUID) -> Like | None:
        """The like ``user_id`` put on ``post_id``, if any."""
        row = self.session.execute(self._get_user_like, [post_id, user_id]).one()
        return Like.from_row(row) if row else None

    def list_likes(self, post_id: UUID) -> list[Like]:
        """All likes of a post, oldest first."""
        rows = self.session.execute(self._get_likes_by_post, [post_id])
        likes = [Like.from_row(row) for row in rows]
        return sorted(likes, key=lambda like: like.created_at)

    def count_likes(self, post_id: UUID) -> int:
        """Number of likes on a post."""
        row = self.session.execute(self._count_likes, [post_id]).one()
        return row[0] if row else 0

    # ==========================================================================
    # Mutations
    # ==========================================================================

    def add_like(self, post_id: UUID, user_id: UUID) -> Like:
        """Like a post.

        The post's like_ids list is updated before the like itself is saved.
        The two writes are independent.

        Raises:
            LikePostNotFoundError: If the post does not exist
            AlreadyLikedError: If the user already liked the post
        """
        if not self.session.execute(self._get_post, [post_id]).one():
            raise LikePostNotFoundError

        if self.get_user_like(post_id, user_id):
            raise AlreadyLikedError

        like = Like(post_id=post_id, user_id=user_id)

        self.session.execute(self._append_post_like, [[like.id], post_id])
        self.session.execute(
            self._insert_like,
            [like.id, like.post_id, like.user_id, like.created_at],
        )
        self.session.execute(
            self._insert_like_by_post,
            [like.post_id, like.user_id, like.id, like.created_at],
        )

        logger.info("like_added", like_id=str(like.id), post_id=str(post_id))
        return like

    def remove_like(self, post_id: UUID, user_id: UUID) -> Like:
        """Remove the current user's like from a post.

        Raises:
            LikeNotFoundError: If the user has no like on the post
            NotLikeOwnerError: If the like belongs to another user
        """
        like = self.get_user_like(post_id, user_id)
        if not like:
            raise LikeNotFoundError

        if like.user_id != user_id:
            raise NotLikeOwnerError

        self.session.execute(self._delete_like, [like.id])
        self.session.execute(self._delete_like_by_post, [like.post_id, like.user_id])
        self.session.execute(self._remove_post_like, [[like.id], like.post_id])

        logger.info("like_removed", like_id=str(like.id), post_id=str(post_id))
        return like

    def delete_likes_for_post(self, post_id: UUID) -> int:
        """Delete every like of a post. Returns the number deleted."""
        likes = self.list_likes(post_id)
        for like in likes:
            self.session.execute(self._delete_like, [like.id])
        self.session.execute(self._delete_post_partition, [post_id])
        return len(likes)

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def to_responses(self, likes: Iterable[Like]) -> list[LikeResponse]:
        """Convert likes to responses with populated users."""
        likes = list(likes)
        users = self.auth_service.get_authors(like.user_id for like in likes)
        return [
            LikeResponse(
                id=like.id,
                post_id=like.post_id,
                user=users.get(like.user_id),
                created_at=like.created_at,
            )
            for like in likes
        ]

    def to_response(self, like: Like) -> LikeResponse:
        """Convert a single like to a populated response."""
        return self.to_responses([like])[0]
