"""FastAPI dependencies for tags and categories."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status

from src.taxonomy.service import TaxonomyService


_taxonomy_service_getter: Callable[[], TaxonomyService] | None = None


def set_taxonomy_service_getter(getter: Callable[[], TaxonomyService]) -> None:
    """Set the taxonomy service getter function."""
    global _taxonomy_service_getter
    _taxonomy_service_getter = getter


def get_taxonomy_service() -> TaxonomyService:
    """Get TaxonomyService instance from app state."""
    if _taxonomy_service_getter is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Taxonomy service unavailable",
        )
    return _taxonomy_service_getter()


TaxonomyServiceDep = Annotated[TaxonomyService, Depends(get_taxonomy_service)]
