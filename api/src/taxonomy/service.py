"""Tag and category service layer.

Business logic for:
- Find-or-create resolution of names to ids
- Population of ids back to records
- Pruning of terms no post references anymore
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING
from uuid import UUID

import structlog

from src.taxonomy.models import Category, Tag, Term
from src.taxonomy.schemas import CategoryResponse, TagResponse


if TYPE_CHECKING:
    from cassandra.cluster import Session


logger = structlog.get_logger(__name__)


class _Vocabulary:
    """Prepared statements for one term table and its by-name lookup."""

    def __init__(self, session: "Session", keyspace: str, model: type[Term]):
        self.model = model
        table = f"{keyspace}.{model.table}"
        by_name = f"{keyspace}.{model.table}_by_name"

        self.get_by_name = session.prepare(f"SELECT id FROM {by_name} WHERE name = ?")
        self.get_by_ids = session.prepare(f"SELECT * FROM {table} WHERE id IN ?")
        self.list_all = session.prepare(f"SELECT * FROM {table}")
        self.insert = session.prepare(
            f"INSERT INTO {table} (id, name, created_at) VALUES (?, ?, ?)"
        )
        self.insert_by_name = session.prepare(
            f"INSERT INTO {by_name} (name, id) VALUES (?, ?)"
        )
        self.delete = session.prepare(f"DELETE FROM {table} WHERE id = ?")
        self.delete_by_name = session.prepare(f"DELETE FROM {by_name} WHERE name = ?")


class TaxonomyService:
    """Service for tags and categories."""

    def __init__(self, session: "Session", keyspace: str):
        """Initialize with Cassandra session."""
        self.session = session
        self.keyspace = keyspace
        self._tags = _Vocabulary(session, keyspace, Tag)
        self._categories = _Vocabulary(session, keyspace, Category)

    # ==========================================================================
    # Find-or-create
    # ==========================================================================

    def resolve_tags(self, names: Iterable[str]) -> list[UUID]:
        """Resolve tag names to ids, creating missing tags."""
        return self._resolve(self._tags, names)

    def resolve_categories(self, names: Iterable[str]) -> list[UUID]:
        """Resolve category names to ids, creating missing categories."""
        return self._resolve(self._categories, names)

    def _resolve(self, vocabulary: _Vocabulary, names: Iterable[str]) -> list[UUID]:
        """Look up each name and create it when absent.

        Names are stripped, blanks skipped, and repeated names resolve once.
        The returned ids follow the input order.
        """
        resolved: dict[str, UUID] = {}

        for raw_name in names:
            name = raw_name.strip()
            if not name or name in resolved:
                continue

            row = self.session.execute(vocabulary.get_by_name, [name]).one()
            if row:
                resolved[name] = row.id
                continue

            term = vocabulary.model(name=name)
            self.session.execute(vocabulary.insert, [term.id, term.name, term.created_at])
            self.session.execute(vocabulary.insert_by_name, [term.name, term.id])
            resolved[name] = term.id
            logger.info(
                "term_created",
                vocabulary=vocabulary.model.table,
                term_id=str(term.id),
                name=name,
            )

        return list(resolved.values())

    # ==========================================================================
    # Queries
    # ==========================================================================

    def get_tags(self, ids: Iterable[UUID]) -> list[Tag]:
        """Get tags by id, preserving the given order."""
        return self._get_many(self._tags, ids)

    def get_categories(self, ids: Iterable[UUID]) -> list[Category]:
        """Get categories by id, preserving the given order."""
        return self._get_many(self._categories, ids)

    def list_tags(self) -> list[Tag]:
        """All tags sorted by name."""
        return self._list_all(self._tags)

    def list_categories(self) -> list[Category]:
        """All categories sorted by name."""
        return self._list_all(self._categories)

    def _get_many(self, vocabulary: _Vocabulary, ids: Iterable[UUID]) -> list:
        wanted = list(dict.fromkeys(ids))
        if not wanted:
            return []

        rows = self.session.execute(vocabulary.get_by_ids, [wanted])
        found = {row.id: vocabulary.model.from_row(row) for row in rows}
        return [found[term_id] for term_id in wanted if term_id in found]

    def _list_all(self, vocabulary: _Vocabulary) -> list:
        rows = self.session.execute(vocabulary.list_all)
        terms = [vocabulary.model.from_row(row) for row in rows]
        return sorted(terms, key=lambda t: t.name.lower())

    # ==========================================================================
    # Pruning
    # ==========================================================================

    def prune_tags(self, referenced_ids: set[UUID]) -> int:
        """Delete tags not in ``referenced_ids``. Returns the number removed."""
        return self._prune(self._tags, referenced_ids)

    def prune_categories(self, referenced_ids: set[UUID]) -> int:
        """Delete categories not in ``referenced_ids``. Returns the number removed."""
        return self._prune(self._categories, referenced_ids)

    def _prune(self, vocabulary: _Vocabulary, referenced_ids: set[UUID]) -> int:
        removed = 0
        for row in self.session.execute(vocabulary.list_all):
            if row.id in referenced_ids:
                continue
            self.session.execute(vocabulary.delete, [row.id])
            self.session.execute(vocabulary.delete_by_name, [row.name])
            removed += 1

        if removed:
            logger.info(
                "terms_pruned", vocabulary=vocabulary.model.table, removed=removed
            )
        return removed

    # ==========================================================================
    # Helpers
    # ==========================================================================

    def to_tag_response(self, tag: Tag) -> TagResponse:
        """Convert Tag model to response schema."""
        return TagResponse(id=tag.id, name=tag.name)

    def to_category_response(self, category: Category) -> CategoryResponse:
        """Convert Category model to response schema."""
        return CategoryResponse(id=category.id, name=category.name)
