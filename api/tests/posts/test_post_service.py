"""Tests for PostService."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import Mock, call
from uuid import uuid4

import pytest

from src.auth.schemas import AuthorSummary
from src.auth.service import AuthService
from src.comments.service import CommentService
from src.likes.service import LikeService
from src.posts.models import Post
from src.posts.schemas import CreatePostRequest, UpdatePostRequest
from src.posts.service import NotPostAuthorError, PostNotFoundError, PostService
from src.taxonomy.models import Tag
from src.taxonomy.service import TaxonomyService


def post_row(author_id, **overrides):
    row = {
        "id": uuid4(),
        "title": "Hello",
        "content": "First post",
        "author_id": author_id,
        "tag_ids": None,
        "category_ids": None,
        "comment_ids": None,
        "like_ids": None,
        "created_at": datetime(2025, 3, 5, 14, 3, 22),
        "updated_at": None,
    }
    row.update(overrides)
    return SimpleNamespace(**row)


@pytest.fixture
def collaborators() -> SimpleNamespace:
    return SimpleNamespace(
        auth=Mock(spec=AuthService),
        taxonomy=Mock(spec=TaxonomyService),
        comments=Mock(spec=CommentService),
        likes=Mock(spec=LikeService),
    )


@pytest.fixture
def post_service(mock_session, collaborators) -> PostService:
    return PostService(
        session=mock_session,
        keyspace="ks",
        auth_service=collaborators.auth,
        taxonomy_service=collaborators.taxonomy,
        comment_service=collaborators.comments,
        like_service=collaborators.likes,
    )


class TestListPosts:
    """Pagination and ordering."""

    def test_newest_first_and_sliced(
        self, post_service, mock_session, result_set, user_id
    ) -> None:
        rows = [
            post_row(user_id, title=f"post {day}", created_at=datetime(2025, 1, day))
            for day in (3, 1, 7, 5, 2, 6, 4)
        ]
        mock_session.execute.return_value = result_set(*rows)

        page_one, total = post_service.list_posts(page=1, per_page=3)
        page_three, _ = post_service.list_posts(page=3, per_page=3)

        assert total == 7
        assert [p.title for p in page_one] == ["post 7", "post 6", "post 5"]
        assert [p.title for p in page_three] == ["post 1"]

    def test_page_past_end_is_empty(
        self, post_service, mock_session, result_set, user_id
    ) -> None:
        mock_session.execute.return_value = result_set(post_row(user_id))

        posts, total = post_service.list_posts(page=4, per_page=5)

        assert posts == []
        assert total == 1


class TestCreatePost:
    def test_resolves_terms_and_inserts(
        self, post_service, mock_session, collaborators, executed, user_id
    ) -> None:
        tag_id, category_id = uuid4(), uuid4()
        collaborators.taxonomy.resolve_tags.return_value = [tag_id]
        collaborators.taxonomy.resolve_categories.return_value = [category_id]

        post = post_service.create_post(
            CreatePostRequest(
                title=" Hello ", content="Body", tags=["python"], categories=["Dev"]
            ),
            author_id=user_id,
        )

        assert post.title == "Hello"
        assert post.author_id == user_id
        assert post.tag_ids == [tag_id]
        assert post.category_ids == [category_id]
        assert post.comment_ids == []
        assert post.like_ids == []
        collaborators.taxonomy.resolve_tags.assert_called_once_with(["python"])
        assert any(q.startswith("INSERT INTO ks.posts") for q in executed(mock_session))

    def test_timestamps_at_storage_precision(self, post_service, user_id) -> None:
        """What create returns equals what a later read returns."""
        post = post_service.create_post(
            CreatePostRequest(title="Hello", content="Body"), author_id=user_id
        )

        assert post.created_at.microsecond % 1000 == 0
        assert post.updated_at == post.created_at


class TestUpdatePost:
    def test_missing_post(self, post_service, user_id) -> None:
        with pytest.raises(PostNotFoundError):
            post_service.update_post(uuid4(), UpdatePostRequest(), user_id)

    def test_not_author(
        self, post_service, mock_session, result_set, user_id, other_user_id
    ) -> None:
        mock_session.execute.return_value = result_set(post_row(other_user_id))

        with pytest.raises(NotPostAuthorError):
            post_service.update_post(uuid4(), UpdatePostRequest(title="x"), user_id)

        assert not any(
            "UPDATE" in c.args[0].query_string
            for c in mock_session.execute.call_args_list
        )

    def test_blank_fields_keep_values(
        self, post_service, route_queries, result_set, collaborators, user_id
    ) -> None:
        tag_id = uuid4()
        route_queries(
            {"WHERE id = ?": result_set(post_row(user_id, tag_ids=[tag_id]))}
        )

        post = post_service.update_post(
            uuid4(), UpdatePostRequest(title="   ", content=""), user_id
        )

        assert post.title == "Hello"
        assert post.content == "First post"
        assert post.tag_ids == [tag_id]
        collaborators.taxonomy.resolve_tags.assert_not_called()

    def test_replaces_fields_and_terms(
        self, post_service, route_queries, result_set, collaborators, user_id
    ) -> None:
        route_queries({"WHERE id = ?": result_set(post_row(user_id))})
        collaborators.taxonomy.resolve_tags.return_value = []

        post = post_service.update_post(
            uuid4(), UpdatePostRequest(title="New title", tags=[]), user_id
        )

        assert post.title == "New title"
        assert post.tag_ids == []
        collaborators.taxonomy.resolve_tags.assert_called_once_with([])
        collaborators.taxonomy.resolve_categories.assert_not_called()
        assert post.updated_at > post.created_at


class TestDeletePost:
    def test_not_author_deletes_nothing(
        self, post_service, mock_session, result_set, collaborators, other_user_id
    ) -> None:
        mock_session.execute.return_value = result_set(post_row(uuid4()))

        with pytest.raises(NotPostAuthorError):
            post_service.delete_post(uuid4(), other_user_id)

        collaborators.likes.delete_likes_for_post.assert_not_called()
        collaborators.comments.delete_comments_for_post.assert_not_called()

    def test_cascade_order_and_pruning(
        self, post_service, mock_session, route_queries, result_set, collaborators, user_id
    ) -> None:
        row = post_row(user_id)
        surviving_tag, surviving_category = uuid4(), uuid4()
        route_queries(
            {
                "SELECT * FROM ks.posts WHERE id = ?": result_set(row),
                "SELECT tag_ids, category_ids FROM ks.posts": result_set(
                    SimpleNamespace(
                        tag_ids=[surviving_tag], category_ids=[surviving_category]
                    ),
                    SimpleNamespace(tag_ids=None, category_ids=None),
                ),
            }
        )

        calls = Mock()

        def delete_likes(pid):
            calls.likes(pid)
            return 2

        def delete_comments(pid):
            calls.comments(pid)
            return 3

        collaborators.likes.delete_likes_for_post.side_effect = delete_likes
        collaborators.comments.delete_comments_for_post.side_effect = delete_comments
        mock_session.execute.side_effect = _recording(
            mock_session.execute.side_effect, calls
        )
        collaborators.taxonomy.prune_tags.return_value = 1
        collaborators.taxonomy.prune_categories.return_value = 0

        removed = post_service.delete_post(row.id, user_id)

        assert removed == {"likes": 2, "comments": 3, "tags": 1, "categories": 0}
        assert calls.mock_calls[:3] == [
            call.likes(row.id),
            call.comments(row.id),
            call.delete_post([row.id]),
        ]
        collaborators.taxonomy.prune_tags.assert_called_once_with({surviving_tag})
        collaborators.taxonomy.prune_categories.assert_called_once_with(
            {surviving_category}
        )


def _recording(execute, calls: Mock):
    """Wrap a routed execute so post deletes are recorded on ``calls``."""

    def _execute(statement, params=None):
        if statement.query_string.startswith("DELETE FROM ks.posts"):
            calls.delete_post(params)
        return execute(statement, params)

    return _execute


class TestResponses:
    def test_populates_relations(
        self, post_service, collaborators, user_id
    ) -> None:
        tag = Tag(name="python")
        post = Post(title="Hi", content="Body", author_id=user_id, tag_ids=[tag.id])
        author = AuthorSummary(id=user_id, name="Ada", email="ada@example.com")
        collaborators.auth.get_authors.return_value = {user_id: author}
        collaborators.taxonomy.get_tags.return_value = [tag]
        collaborators.taxonomy.get_categories.return_value = []
        collaborators.taxonomy.to_tag_response.side_effect = (
            lambda t: TaxonomyService.to_tag_response(collaborators.taxonomy, t)
        )
        collaborators.comments.list_comments.return_value = []
        collaborators.comments.to_responses.return_value = []
        collaborators.likes.count_likes.return_value = 4

        response = post_service.to_detail_response(post)

        assert response.author == author
        assert [t.name for t in response.tags] == ["python"]
        assert response.comments == []
        assert response.like_count == 4
        assert response.liked_by_me is False
        collaborators.likes.get_user_like.assert_not_called()

    def test_liked_by_viewer(
        self, post_service, collaborators, user_id, other_user_id
    ) -> None:
        post = Post(title="Hi", content="Body", author_id=other_user_id)
        collaborators.auth.get_authors.return_value = {}
        collaborators.taxonomy.get_tags.return_value = []
        collaborators.taxonomy.get_categories.return_value = []
        collaborators.comments.list_comments.return_value = []
        collaborators.comments.to_responses.return_value = []
        collaborators.likes.count_likes.return_value = 1
        collaborators.likes.get_user_like.return_value = Mock()

        response = post_service.to_detail_response(post, viewer_id=user_id)

        assert response.liked_by_me is True
        collaborators.likes.get_user_like.assert_called_once_with(post.id, user_id)

    def test_missing_author_is_none(self, post_service, collaborators, user_id):

        collaborators.auth.get_authors.return_value = {}
        collaborators.taxonomy.get_tags.return_value = []
        collaborators.taxonomy.get_categories.return_value = []
        collaborators.comments.list_comments.return_value = []
        collaborators.comments.to_responses.return_value = []

        response = post_service.to_response(
            Post(title="Hi", content="Body", author_id=user_id)
        )

        assert response.author is None
