"""Tags and categories.

Note: Router is not exported here to avoid circular imports.
Import directly from src.taxonomy.router when needed.
"""

from .models import TAXONOMY_TABLES_CQL, Category, Tag
from .service import TaxonomyService


__all__ = [
    "TAXONOMY_TABLES_CQL",
    "Category",
    "Tag",
    "TaxonomyService",
]
