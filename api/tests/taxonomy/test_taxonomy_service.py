"""Tests for TaxonomyService find-or-create and pruning."""

from datetime import datetime
from types import SimpleNamespace
from uuid import uuid4

import pytest

from src.taxonomy.service import TaxonomyService


@pytest.fixture
def taxonomy_service(mock_session) -> TaxonomyService:
    return TaxonomyService(session=mock_session, keyspace="ks")


def term_row(name: str):
    return SimpleNamespace(id=uuid4(), name=name, created_at=datetime(2025, 1, 1))


class TestResolve:
    """Find-or-create resolution."""

    def test_existing_name_reuses_id(
        self, taxonomy_service, mock_session, route_queries, result_set, executed
    ) -> None:
        existing = term_row("python")
        route_queries({"tags_by_name WHERE name = ?": result_set(existing)})

        ids = taxonomy_service.resolve_tags(["python"])

        assert ids == [existing.id]
        assert not any(q.startswith("INSERT") for q in executed(mock_session))

    def test_missing_name_is_created(
        self, taxonomy_service, mock_session, executed
    ) -> None:
        ids = taxonomy_service.resolve_categories(["Travel"])

        assert len(ids) == 1
        statements = executed(mock_session)
        assert any("INSERT INTO ks.categories (" in q for q in statements)
        assert any("INSERT INTO ks.categories_by_name" in q for q in statements)
        params = [c.args[1] for c in mock_session.execute.call_args_list]
        assert ["Travel", ids[0]] in params

    def test_names_stripped_deduped_blanks_skipped(
        self, taxonomy_service, mock_session
    ) -> None:
        ids = taxonomy_service.resolve_tags([" python ", "python", "", "   ", "web"])

        assert len(ids) == 2
        lookups = [
            c.args[1][0]
            for c in mock_session.execute.call_args_list
            if "WHERE name = ?" in c.args[0].query_string
        ]
        assert lookups == ["python", "web"]

    def test_mixed_keeps_input_order(
        self, taxonomy_service, route_queries, result_set
    ) -> None:
        existing = term_row("web")
        route_queries(
            {
                "tags_by_name WHERE name = ?": lambda params: (
                    result_set(existing) if params == ["web"] else result_set()
                )
            }
        )

        ids = taxonomy_service.resolve_tags(["new", "web"])

        assert len(ids) == 2
        assert ids[1] == existing.id
        assert ids[0] != existing.id

    def test_empty_input(self, taxonomy_service, mock_session) -> None:
        assert taxonomy_service.resolve_tags([]) == []
        mock_session.execute.assert_not_called()


class TestQueries:
    """Population and listing."""

    def test_get_tags_preserves_order(
        self, taxonomy_service, mock_session, result_set
    ) -> None:
        a, b = term_row("a"), term_row("b")
        mock_session.execute.return_value = result_set(a, b)

        tags = taxonomy_service.get_tags([b.id, a.id, uuid4()])

        assert [t.name for t in tags] == ["b", "a"]

    def test_get_categories_empty_skips_query(
        self, taxonomy_service, mock_session
    ) -> None:
        assert taxonomy_service.get_categories([]) == []
        mock_session.execute.assert_not_called()

    def test_list_sorted_by_name(
        self, taxonomy_service, mock_session, result_set
    ) -> None:
        mock_session.execute.return_value = result_set(
            term_row("web"), term_row("Api"), term_row("python")
        )

        names = [t.name for t in taxonomy_service.list_tags()]

        assert names == ["Api", "python", "web"]


class TestPrune:
    """Orphan removal."""

    def test_prunes_unreferenced(
        self, taxonomy_service, mock_session, route_queries, result_set, executed
    ) -> None:
        kept, orphan = term_row("kept"), term_row("orphan")
        route_queries({"SELECT * FROM ks.tags": result_set(kept, orphan)})

        removed = taxonomy_service.prune_tags({kept.id})

        assert removed == 1
        deletes = [
            c.args[1]
            for c in mock_session.execute.call_args_list
            if c.args[0].query_string.startswith("DELETE")
        ]
        assert deletes == [[orphan.id], ["orphan"]]
        assert "DELETE FROM ks.tags_by_name WHERE name = ?" in executed(mock_session)

    def test_nothing_to_prune(
        self, taxonomy_service, route_queries, result_set
    ) -> None:
        term = term_row("used")
        route_queries({"SELECT * FROM ks.categories": result_set(term)})

        assert taxonomy_service.prune_categories({term.id}) == 0
