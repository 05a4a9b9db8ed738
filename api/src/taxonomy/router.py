"""Tag and category API endpoints."""

from fastapi import APIRouter

from src.taxonomy.dependencies import TaxonomyServiceDep
from src.taxonomy.schemas import CategoryListResponse, TagListResponse


router_tags = APIRouter(prefix="/v1/tags", tags=["taxonomy"])
router_categories = APIRouter(prefix="/v1/categories", tags=["taxonomy"])


@router_tags.get(
    "",
    response_model=TagListResponse,
    summary="List tags",
)
async def list_tags(taxonomy_service: TaxonomyServiceDep) -> TagListResponse:
    """List every tag in use, sorted by name."""
    tags = [taxonomy_service.to_tag_response(t) for t in taxonomy_service.list_tags()]
    return TagListResponse(tags=tags, total=len(tags))


@router_categories.get(
    "",
    response_model=CategoryListResponse,
    summary="List categories",
)
async def list_categories(
    taxonomy_service: TaxonomyServiceDep,
) -> CategoryListResponse:
    """List every category in use, sorted by name."""
    categories = [
        taxonomy_service.to_category_response(c)
        for c in taxonomy_service.list_categories()
    ]
    return CategoryListResponse(categories=categories, total=len(categories))
