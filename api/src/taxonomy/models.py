"""Database models for tags and categories.

Each vocabulary has a main table keyed by id and a lookup table keyed by
name, written together on creation.
"""

from datetime import datetime
from typing import Any, ClassVar
from uuid import UUID, uuid4

from src.auth.models import ensure_utc_aware, now_millis


TAGS_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.tags (
    id UUID PRIMARY KEY,
    name TEXT,
    created_at TIMESTAMP
)
"""

TAGS_BY_NAME_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.tags_by_name (
    name TEXT PRIMARY KEY,
    id UUID
)
"""

CATEGORIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories (
    id UUID PRIMARY KEY,
    name TEXT,
    created_at TIMESTAMP
)
"""

CATEGORIES_BY_NAME_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.categories_by_name (
    name TEXT PRIMARY KEY,
    id UUID
)
"""

TAXONOMY_TABLES_CQL = [
    TAGS_TABLE_CQL,
    TAGS_BY_NAME_TABLE_CQL,
    CATEGORIES_TABLE_CQL,
    CATEGORIES_BY_NAME_TABLE_CQL,
]


class Term:
    """A named label attached to posts.

    Attributes:
        id: Unique identifier
        name: Unique name within its vocabulary
        created_at: Creation timestamp
    """

    table: ClassVar[str] = ""

    def __init__(
        self,
        name: str,
        id: UUID | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.name = name
        self.created_at = ensure_utc_aware(created_at) or now_millis()

    @classmethod
    def from_row(cls, row: Any) -> "Term":
        """Create instance from Cassandra row."""
        return cls(id=row.id, name=row.name, created_at=row.created_at)

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class Tag(Term):
    """Post tag."""

    table = "tags"


class Category(Term):
    """Post category."""

    table = "categories"
