"""Shared fixtures: app client, tokens, Cassandra result stubs."""

import os
import tempfile
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any
from unittest.mock import Mock
from uuid import UUID, uuid4

import pytest


os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("LOG_DIR", str(Path(tempfile.gettempdir()) / "inkwell-test-logs"))

from cassandra.cluster import Session  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from src import main  # noqa: E402
from src.auth.dependencies import set_auth_service_getter  # noqa: E402
from src.auth.security import create_access_token  # noqa: E402
from src.comments.dependencies import set_comment_service_getter  # noqa: E402
from src.likes.dependencies import set_like_service_getter  # noqa: E402
from src.posts.dependencies import set_post_service_getter  # noqa: E402
from src.taxonomy.dependencies import set_taxonomy_service_getter  # noqa: E402


class FakeResultSet(list):
    """List of rows with the ``one()`` accessor of a driver ResultSet."""

    def one(self) -> Any:
        return self[0] if self else None


@pytest.fixture
def result_set() -> Callable[..., FakeResultSet]:
    """Build a ResultSet stand-in from rows."""

    def _make(*rows: Any) -> FakeResultSet:
        return FakeResultSet(rows)

    return _make


@pytest.fixture
def mock_session() -> Mock:
    """Mock Cassandra session with stubbed prepare/execute."""
    session = Mock(spec=Session)
    session.prepare = Mock(side_effect=lambda cql: Mock(query_string=cql))
    session.execute = Mock(return_value=FakeResultSet())
    return session


@pytest.fixture
def route_queries(mock_session) -> Callable[[dict[str, Any]], None]:
    """Answer ``session.execute`` by matching fragments of the prepared CQL.

    Values are result sets or callables taking the bound parameters.
    Unmatched statements return an empty result set.
    """

    def _route(routes: dict[str, Any]) -> None:
        def _execute(statement: Any, params: Any = None) -> Any:
            cql = " ".join(str(getattr(statement, "query_string", statement)).split())
            for fragment, result in routes.items():
                if fragment in cql:
                    return result(params) if callable(result) else result
            return FakeResultSet()

        mock_session.execute.side_effect = _execute

    return _route


def executed_cql(session: Mock) -> list[str]:
    """Normalized CQL of every executed statement, in order."""
    return [
        " ".join(str(getattr(c.args[0], "query_string", c.args[0])).split())
        for c in session.execute.call_args_list
    ]


@pytest.fixture
def executed() -> Callable[[Mock], list[str]]:
    return executed_cql


@pytest.fixture
def client() -> TestClient:
    """Test client without lifespan, so no database connection is attempted."""
    return TestClient(main.app)


@pytest.fixture
def user_id() -> UUID:
    return uuid4()


@pytest.fixture
def other_user_id() -> UUID:
    return uuid4()


@pytest.fixture
def make_token() -> Callable[[UUID], str]:
    """Access token factory."""

    def _make(uid: UUID, name: str = "Test Writer") -> str:
        return create_access_token(
            {"sub": str(uid), "email": f"{uid.hex[:8]}@example.com", "name": name}
        )

    return _make


@pytest.fixture
def auth_headers(make_token, user_id) -> dict[str, str]:
    """Authorization header for ``user_id``."""
    return {"Authorization": f"Bearer {make_token(user_id)}"}


@pytest.fixture
def override_services() -> Iterator[Callable[..., None]]:
    """Swap service getters for mocks and restore the app's getters after."""
    setters = {
        "auth": set_auth_service_getter,
        "taxonomy": set_taxonomy_service_getter,
        "comment": set_comment_service_getter,
        "like": set_like_service_getter,
        "post": set_post_service_getter,
    }

    def _override(**services: Any) -> None:
        for name, service in services.items():
            setters[name](lambda s=service: s)

    yield _override

    set_auth_service_getter(main.get_auth_service)
    set_taxonomy_service_getter(main.get_taxonomy_service)
    set_comment_service_getter(main.get_comment_service)
    set_like_service_getter(main.get_like_service)
    set_post_service_getter(main.get_post_service)
