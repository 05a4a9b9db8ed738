"""Tests for LikeService."""

from datetime import datetime
from types import SimpleNamespace
from unittest.mock import Mock
from uuid import uuid4

import pytest

from src.auth.schemas import AuthorSummary
from src.auth.service import AuthService
from src.likes.models import Like
from src.likes.service import (
    AlreadyLikedError,
    LikeNotFoundError,
    LikePostNotFoundError,
    LikeService,
)


USER_LIKE = "WHERE post_id = ? AND user_id = ?"
POST_LIKES = "SELECT * FROM ks.likes_by_post WHERE post_id = ?"


def like_row(user_id, post_id=None, created_at=None):
    return SimpleNamespace(
        id=uuid4(),
        post_id=post_id or uuid4(),
        user_id=user_id,
        created_at=created_at or datetime(2025, 3, 5, 14, 3, 22),
    )


@pytest.fixture
def auth_service() -> Mock:
    return Mock(spec=AuthService)


@pytest.fixture
def like_service(mock_session, auth_service) -> LikeService:
    return LikeService(session=mock_session, keyspace="ks", auth_service=auth_service)


class TestAddLike:
    def test_missing_post(self, like_service, user_id) -> None:
        with pytest.raises(LikePostNotFoundError, match="Post not found."):
            like_service.add_like(uuid4(), user_id)

    def test_already_liked(
        self, like_service, mock_session, route_queries, result_set, executed, user_id
    ) -> None:
        post_id = uuid4()
        route_queries(
            {
                "SELECT id FROM ks.posts": result_set(SimpleNamespace(id=post_id)),
                USER_LIKE: result_set(like_row(user_id, post_id)),
            }
        )

        with pytest.raises(AlreadyLikedError):
            like_service.add_like(post_id, user_id)

        assert not any(
            q.startswith(("INSERT", "UPDATE")) for q in executed(mock_session)
        )

    def test_post_list_updated_before_insert(
        self, like_service, mock_session, route_queries, result_set, executed, user_id
    ) -> None:
        post_id = uuid4()
        route_queries({"SELECT id FROM ks.posts": result_set(SimpleNamespace(id=post_id))})

        like = like_service.add_like(post_id, user_id)

        statements = executed(mock_session)
        assert statements[2] == "UPDATE ks.posts SET like_ids = like_ids + ? WHERE id = ?"
        assert statements[3].startswith("INSERT INTO ks.likes (")
        assert statements[4].startswith("INSERT INTO ks.likes_by_post")
        assert mock_session.execute.call_args_list[2].args[1] == [[like.id], post_id]
        assert like.user_id == user_id


class TestRemoveLike:
    def test_no_like(self, like_service, user_id) -> None:
        with pytest.raises(LikeNotFoundError, match="Like Not Found"):
            like_service.remove_like(uuid4(), user_id)

    def test_removes_and_detaches(
        self, like_service, mock_session, route_queries, result_set, executed, user_id
    ) -> None:
        row = like_row(user_id)
        route_queries({USER_LIKE: result_set(row)})

        like = like_service.remove_like(row.post_id, user_id)

        assert like.id == row.id
        statements = executed(mock_session)
        assert statements[1] == "DELETE FROM ks.likes WHERE id = ?"
        assert statements[2].startswith("DELETE FROM ks.likes_by_post")
        assert statements[3] == "UPDATE ks.posts SET like_ids = like_ids - ? WHERE id = ?"
        assert mock_session.execute.call_args_list[3].args[1] == [[row.id], row.post_id]


class TestQueries:
    def test_list_oldest_first(
        self, like_service, mock_session, result_set, user_id
    ) -> None:
        late = like_row(user_id, created_at=datetime(2025, 3, 6))
        early = like_row(uuid4(), created_at=datetime(2025, 3, 1))
        mock_session.execute.return_value = result_set(late, early)

        likes = like_service.list_likes(uuid4())

        assert [like.id for like in likes] == [early.id, late.id]

    def test_count(self, like_service, mock_session, result_set) -> None:
        mock_session.execute.return_value = result_set((3,))

        assert like_service.count_likes(uuid4()) == 3

    def test_count_without_row(self, like_service) -> None:
        assert like_service.count_likes(uuid4()) == 0


class TestCascade:
    def test_delete_likes_for_post(
        self, like_service, mock_session, route_queries, result_set, executed
    ) -> None:
        post_id = uuid4()
        rows = [like_row(uuid4(), post_id) for _ in range(3)]
        route_queries({POST_LIKES: result_set(*rows)})

        assert like_service.delete_likes_for_post(post_id) == 3

        statements = executed(mock_session)
        assert statements.count("DELETE FROM ks.likes WHERE id = ?") == 3
        assert statements[-1] == "DELETE FROM ks.likes_by_post WHERE post_id = ?"


class TestResponses:
    def test_users_populated(self, like_service, auth_service, user_id) -> None:
        user = AuthorSummary(id=user_id, name="Ada", email="ada@example.com")
        auth_service.get_authors.return_value = {user_id: user}

        response = like_service.to_response(Like(post_id=uuid4(), user_id=user_id))

        assert response.user == user


def test_like_timestamp_at_storage_precision(user_id) -> None:
    assert Like(post_id=uuid4(), user_id=user_id).created_at.microsecond % 1000 == 0
