"""Blog post service layer.

Business logic for:
- Post CRUD with author-only update and delete
- Paginated listing, newest first
- Population of author, tags, categories and comments
- Cascade delete of likes and comments, then pruning of unused terms
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.auth.models import now_millis
from src.posts.models import Post
from src.posts.schemas import (
    CreatePostRequest,
    PostDetailResponse,
    PostResponse,
    UpdatePostRequest,
)


if TYPE_CHECKING:
    from cassandra.cluster import Session

    from src.auth.service import AuthService
    from src.comments.service import CommentService
    from src.likes.service import LikeService
    from src.taxonomy.service import TaxonomyService


logger = structlog.get_logger(__name__)


# ==============================================================================
# Custom Exceptions
# ==============================================================================


class PostError(Exception):
    """Base post error."""

    def __init__(self, message: str, code: str = "post_error"):
        self.message = message
        self.code = code
        super().__init__(message)


class PostNotFoundError(PostError):
    """Post not found."""

    def __init__(self, message: str = "Post not found"):
        super().__init__(message, "post_not_found")


class NotPostAuthorError(PostError):
    """Current user did not write the post."""

    def __init__(self, message: str = "You are not the author of this post."):
        super().__init__(message, "not_post_author")


# ==============================================================================
# Post Service
# ==============================================================================


class PostService:
    """Service for blog posts."""

    def __init__(
        self,
        session: "Session",
        keyspace: str,
        auth_service: "AuthService",
        taxonomy_service: "TaxonomyService",
        comment_service: "CommentService",
        like_service: "LikeService",
    ):
        """Initialize with Cassandra session and collaborating services."""
        self.session = session
        self.keyspace = keyspace
        self.auth_service = auth_service
        self.taxonomy_service = taxonomy_service
        self.comment_service = comment_service
        self.like_service = like_service
        self._prepare_statements()

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for better performance."""
        self._insert_post = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.posts
            (id, title, content, author_id, tag_ids, category_ids,
             comment_ids, like_ids, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """)
        self._get_post = self.session.prepare(
            f"SELECT * FROM {self.keyspace}.posts WHERE id = ?"
        )
        self._list_posts = self.session.prepare(f"SELECT * FROM {self.keyspace}.posts")
        self._list_term_refs = self.session.prepare(
            f"SELECT tag_ids, category_ids FROM {self.keyspace}.posts"
        )
        self._update_post = self.session.prepare(f"""
            UPDATE {self.keyspace}.posts
            SET title = ?, content = ?, tag_ids = ?, category_ids = ?, updated_at = ?
            WHERE id = ?
        """)
        self._delete_post = self.session.prepare(
            f"DELETE FROM {self.keyspace}.posts WHERE id = ?"
        )

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_post(self, post_id: UUID) -> Post | None:
        """Get post by ID."""
        row = self.session.execute(self._get_post, [post_id]).one()
        return Post.from_row(row) if row else None

    def list_posts(self, page: int, per_page: int) -> tuple[list[Post], int]:
        """One page of posts, newest first.

        Returns:
            Tuple of (posts on the page, total number of posts)
        """
        rows = self.session.execute(self._list_posts)
        posts = sorted(
            (Post.from_row(row) for row in rows),
            key=lambda p: p.created_at,
            reverse=True,
        )
        start = (page - 1) * per_page
        return posts[start : start + per_page], len(posts)

    # ==========================================================================
    # Mutations
    # ==========================================================================

    def create_post(self, data: CreatePostRequest, author_id: UUID) -> Post:
        """Create a post, resolving tag and category names to ids."""
        logger.info("post_create_started", author_id=str(author_id))

        tag_ids = self.taxonomy_service.resolve_tags(data.tags)
        category_ids = self.taxonomy_service.resolve_categories(data.categories)
        logger.debug(
            "post_terms_resolved",
            tag_count=len(tag_ids),
            category_count=len(category_ids),
        )

        post = Post(
            title=data.title,
            content=data.content,
            author_id=author_id,
            tag_ids=tag_ids,
            category_ids=category_ids,
        )
        self.session.execute(
            self._insert_post,
            [
                post.id,
                post.title,
                post.content,
                post.author_id,
                post.tag_ids,
                post.category_ids,
                post.comment_ids,
                post.like_ids,
                post.created_at,
                post.updated_at,
            ],
        )

        logger.info("post_created", post_id=str(post.id), author_id=str(author_id))
        return post

    def update_post(
        self, post_id: UUID, data: UpdatePostRequest, user_id: UUID
    ) -> Post:
        """Update a post.

        Raises:
            PostNotFoundError: If the post doesn't exist
            NotPostAuthorError: If ``user_id`` is not the author
        """
        post = self._get_owned_post(post_id, user_id)

        if data.title and data.title.strip():
            post.title = data.title.strip()
        if data.content and data.content.strip():
            post.content = data.content.strip()
        if data.tags is not None:
            post.tag_ids = self.taxonomy_service.resolve_tags(data.tags)
        if data.categories is not None:
            post.category_ids = self.taxonomy_service.resolve_categories(
                data.categories
            )
        post.updated_at = now_millis()

        self.session.execute(
            self._update_post,
            [
                post.title,
                post.content,
                post.tag_ids,
                post.category_ids,
                post.updated_at,
                post.id,
            ],
        )

        logger.info("post_updated", post_id=str(post.id))
        return post

    def delete_post(self, post_id: UUID, user_id: UUID) -> dict[str, int]:
        """Delete a post and everything hanging off it.

        Order: likes, comments, the post, then tags and categories no
        remaining post references.

        Returns:
            Counts of removed likes, comments, tags and categories

        Raises:
            PostNotFoundError: If the post doesn't exist
            NotPostAuthorError: If ``user_id`` is not the author
        """
        post = self._get_owned_post(post_id, user_id)

        likes_removed = self.like_service.delete_likes_for_post(post.id)
        comments_removed = self.comment_service.delete_comments_for_post(post.id)
        self.session.execute(self._delete_post, [post.id])

        tag_refs, category_refs = self._referenced_terms()
        tags_pruned = self.taxonomy_service.prune_tags(tag_refs)
        categories_pruned = self.taxonomy_service.prune_categories(category_refs)

        removed = {
            "likes": likes_removed,
            "comments": comments_removed,
            "tags": tags_pruned,
            "categories": categories_pruned,
        }
        logger.info("post_deleted", post_id=str(post.id), **removed)
        return removed

    def _get_owned_post(self, post_id: UUID, user_id: UUID) -> Post:
        post = self.get_post(post_id)
        if not post:
            raise PostNotFoundError

        if not post.is_author(user_id):
            logger.warning(
                "post_access_denied",
                post_id=str(post_id),
                author_id=str(post.author_id),
            )
            raise NotPostAuthorError

        return post

    def _referenced_terms(self) -> tuple[set[UUID], set[UUID]]:
        """Tag and category ids referenced by any stored post."""
        tag_refs: set[UUID] = set()
        category_refs: set[UUID] = set()
        for row in self.session.execute(self._list_term_refs):
            tag_refs.update(row.tag_ids or [])
            category_refs.update(row.category_ids or [])
        return tag_refs, category_refs

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def to_responses(self, posts: Iterable[Post]) -> list[PostResponse]:
        """Convert posts to fully populated responses."""
        posts = list(posts)
        authors = self.auth_service.get_authors(p.author_id for p in posts)

        responses = []
        for post in posts:
            tags = self.taxonomy_service.get_tags(post.tag_ids)
            categories = self.taxonomy_service.get_categories(post.category_ids)
            comments = self.comment_service.list_comments(post.id)
            responses.append(
                PostResponse(
                    id=post.id,
                    title=post.title,
                    content=post.content,
                    author=authors.get(post.author_id),
                    tags=[self.taxonomy_service.to_tag_response(t) for t in tags],
                    categories=[
                        self.taxonomy_service.to_category_response(c)
                        for c in categories
                    ],
                    comments=self.comment_service.to_responses(comments),
                    like_ids=post.like_ids,
                    created_at=post.created_at,
                    updated_at=post.updated_at,
                )
            )
        return responses

    def to_response(self, post: Post) -> PostResponse:
        """Convert a single post to a populated response."""
        return self.to_responses([post])[0]

    def to_detail_response(
        self, post: Post, viewer_id: UUID | None = None
    ) -> PostDetailResponse:
        """Populated post plus the number of likes.

        ``liked_by_me`` is only looked up for a signed-in viewer.
        """
        response = self.to_response(post)
        liked = viewer_id is not None and (
            self.like_service.get_user_like(post.id, viewer_id) is not None
        )
        return PostDetailResponse(
            **response.model_dump(),
            like_count=self.like_service.count_likes(post.id),
            liked_by_me=liked,
        )
