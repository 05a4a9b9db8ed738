"""Comment system service layer.

Business logic for:
- Comment CRUD scoped to a post
- Author-only edit and delete
- Keeping the post's comment_ids list in step with the comment tables
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from .models import Comment, now_millis
from .schemas import CommentResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from src.auth.service import AuthService


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class CommentError(Exception):
    """Base comment error."""

    def __init__(self, message: str, code: str = "comment_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class CommentNotFoundError(CommentError):
    """Comment not found."""

    def __init__(self, message: str = "Comment not found"):
        super().__init__(message, "comment_not_found")


class CommentPostNotFoundError(CommentError):
    """Target post does not exist."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message, "post_not_found")


class NotCommentAuthorError(CommentError):
    """Current user did not write the comment."""

    def __init__(
        self, message: str = "You are not the Author. You may not edit this comment"
    ):
        super().__init__(message, "not_comment_author")


# ==============================================================================
# Comment Service
# ==============================================================================


class CommentService:
    """Service for comment management."""

    def __init__(self, session: "Session", keyspace: str, auth_service: "AuthService"):
        """Initialize with Cassandra session and the author resolver."""
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
        self._append_post_comment = self.session.prepare(
            f"UPDATE {self.keyspace}.posts SET comment_ids = comment_ids + ? WHERE id = ?"
        )
        self._remove_post_comment = self.session.prepare(
            f"UPDATE {self.keyspace}.posts SET comment_ids = comment_ids - ? WHERE id = ?"
        )

        # Comment CRUD
        self._insert_comment = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments
            (id, post_id, author_id, content, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)
        self._insert_comment_by_post = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.comments_by_post
            (post_id, created_at, id, author_id, content, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """)
        self._get_comment = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.comments WHERE id = ?"
        )
        self._get_comments_by_post = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.comments_by_post WHERE post_id = ?"
        )
        self._update_comment = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments
            SET content = ?, updated_at = ?
            WHERE id = ?
        """)
        self._update_comment_by_post = self.session.prepare(f"""
            UPDATE {self.keyspace}.comments_by_post
            SET content = ?, updated_at = ?
            WHERE post_id = ? AND created_at = ? AND id = ?
        """)
        self._delete_comment = self.session.prepare(
            f"DELETE FROM {self.keyspace}.comments WHERE id = ?"
        )
        self._delete_comment_by_post = self.session.prepare(f"""
            DELETE FROM {self.keyspace}.comments_by_post
            WHERE post_id = ? AND created_at = ? AND id = ?
        """)
        self._delete_post_partition = self.session.prepare(
            f"DELETE FROM {self.keyspace}.comments_by_post WHERE post_id = ?"
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    def list_comments(self, post_id: UUID) -> list[Comment]:
        """All comments of a post, newest first."""
        rows = self.session.execute(self._get_comments_by_post, [post_id])
        return [Comment.from_row(row) for row in rows]

    def get_comment(self, comment_id: UUID) -> Comment | None:
        """Get comment by ID."""
        row = self.session.execute(self._get_comment, [comment_id]).one()
        return Comment.from_row(row) if row else None

    # ==========================================================================
    # Mutations
    # ==========================================================================

    def create_comment(self, post_id: UUID, author_id: UUID, content: str) -> Comment:
        """Save a comment and append it to the post.

        Raises:
            CommentPostNotFoundError: If the post does not exist
        """
        if not self.session.execute(self._get_post, [post_id]).one():
            raise CommentPostNotFoundError

        comment = Comment(post_id=post_id, author_id=author_id, content=content)

        self.session.execute(
            self._insert_comment,
            [
                comment.id,
                comment.post_id,
                comment.author_id,
                comment.content,
                comment.created_at,
                comment.updated_at,
            ],
        )
        self.session.execute(
            self._insert_comment_by_post,
            [
                comment.post_id,
                comment.created_at,
                comment.id,
                comment.author_id,
                comment.content,
                comment.updated_at,
            ],
        )
        self.session.execute(self._append_post_comment, [[comment.id], post_id])

        logger.info(
            "comment_created",
            comment_id=str(comment.id),
            post_id=str(post_id),
        )
        return comment

    def edit_comment(
        self, comment_id: UUID, user_id: UUID, content: str | None
    ) -> Comment:
        """Replace the text of a comment.

        Blank or missing ``content`` keeps the existing text.

        Raises:
            CommentNotFoundError: If the comment does not exist
            NotCommentAuthorError: If ``user_id`` is not the author
        """
        comment = self._get_owned_comment(comment_id, user_id)

        if content and content.strip():
            comment.content = content.strip()
        comment.updated_at = now_millis()

        self.session.execute(
            self._update_comment,
            [comment.content, comment.updated_at, comment.id],
        )
        self.session.execute(
            self._update_comment_by_post,
            [
                comment.content,
                comment.updated_at,
                comment.post_id,
                comment.created_at,
                comment.id,
            ],
        )

        logger.info("comment_edited", comment_id=str(comment.id))
        return comment

    def delete_comment(self, comment_id: UUID, user_id: UUID) -> Comment:
        """Detach a comment from its post and delete it.

        Raises:
            CommentNotFoundError: If the comment does not exist
            NotCommentAuthorError: If ``user_id`` is not the author
        """
        comment = self._get_owned_comment(
            comment_id,
            user_id,
            denied_message="You are not the Author. You may not delete this comment",
        )

        self.session.execute(self._remove_post_comment, [[comment.id], comment.post_id])
        self.session.execute(self._delete_comment, [comment.id])
        self.session.execute(
            self._delete_comment_by_post,
            [comment.post_id, comment.created_at, comment.id],
        )

        logger.info(
            "comment_deleted",
            comment_id=str(comment.id),
            post_id=str(comment.post_id),
        )
        return comment

    def delete_comments_for_post(self, post_id: UUID) -> int:
        """Delete every comment of a post. Returns the number deleted."""
        comments = self.list_comments(post_id)
        for comment in comments:
            self.session.execute(self._delete_comment, [comment.id])
        self.session.execute(self._delete_post_partition, [post_id])
        return len(comments)

    def _get_owned_comment(
        self,
        comment_id: UUID,
        user_id: UUID,
        denied_message: str | None = None,
    ) -> Comment:
        comment = self.get_comment(comment_id)
        if not comment:
            raise CommentNotFoundError

        if not comment.is_author(user_id):
            logger.warning(
                "comment_access_denied",
                comment_id=str(comment_id),
                author_id=str(comment.author_id),
            )
            if denied_message:
                raise NotCommentAuthorError(denied_message)
            raise NotCommentAuthorError

        return comment

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def to_responses(self, comments: Iterable[Comment]) -> list[CommentResponse]:
        """Convert comments to responses with populated authors."""
        comments = list(comments)
        authors = self.auth_service.get_authors(c.author_id for c in comments)
        return [
            CommentResponse(
                id=c.id,
                post_id=c.post_id,
                author=authors.get(c.author_id),
                content=c.content,
                created_at=c.created_at,
                updated_at=c.updated_at,
            )
            for c in comments
        ]

    def to_response(self, comment: Comment) -> CommentResponse:
        """Convert a single comment to a populated response."""
        return self.to_responses([comment])[0]
