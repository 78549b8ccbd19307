"""Category schemas for API request/response and storage."""

from datetime import datetime

from pydantic import Field

from mobileshop.schemas.common import CamelModel


class Category(CamelModel):
    id: str
    name: str
    slug: str
    description: str = ""
    image: str = ""
    parent_id: str | None = None
    level: int = 0
    path: list[str]
    is_active: bool = True
    order: int = 1
    created_at: datetime
    updated_at: datetime


class CategoryNode(Category):
    """Category with its children attached, used for the tree view."""
    children: list["CategoryNode"] = Field(default_factory=list)


class CategoryCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    slug: str | None = Field(None, max_length=100)
    description: str = ""
    image: str = ""
    parent_id: str | None = None
    is_active: bool = True
    order: int | None = None


class CategoryUpdate(CamelModel):
    """Partial update. An explicit `parentId: null` moves the category to the root."""
    name: str | None = Field(None, min_length=1, max_length=100)
    slug: str | None = Field(None, max_length=100)
    description: str | None = None
    image: str | None = None
    parent_id: str | None = None
    is_active: bool | None = None
    order: int | None = None


class CategoryListResponse(CamelModel):
    items: list[Category]
    total: int


class CategoryTreeResponse(CamelModel):
    items: list[CategoryNode]
    total: int


class CategoryDetailResponse(CamelModel):
    category: Category
    children: list[Category] | None = None
    ancestors: list[Category] | None = None


class CategoryDeleteResponse(CamelModel):
    deleted_ids: list[str]
    message: str
