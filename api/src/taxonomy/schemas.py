"""Pydantic schemas for tags and categories."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class TagResponse(BaseModel):
    """Tag reference."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class CategoryResponse(BaseModel):
    """Category reference."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str


class TagListResponse(BaseModel):
    """All tags."""

    tags: list[TagResponse]
    total: int


class CategoryListResponse(BaseModel):
    """All categories."""

    categories: list[CategoryResponse]
    total: int
