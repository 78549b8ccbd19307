"""Category endpoints: public reads, admin-only mutations."""

from fastapi import APIRouter, Depends, HTTPException, Query, status

from mobileshop.core.deps import get_category_service, get_current_admin
from mobileshop.schemas.auth import CurrentAdmin
from mobileshop.schemas.category import (
    Category,
    CategoryCreate,
    CategoryDeleteResponse,
    CategoryDetailResponse,
    CategoryListResponse,
    CategoryTreeResponse,
    CategoryUpdate,
)
from mobileshop.services.categories import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


@router.get("", response_model=CategoryListResponse | CategoryTreeResponse)
async def list_categories(
    view: str = Query("flat", pattern="^(flat|tree|roots)$"),
    parent_id: str | None = None,
    service: CategoryService = Depends(get_category_service),
):
    """List categories as a flat list, a nested tree, the roots, or one parent's children."""
    if parent_id is not None:
        items = await service.get_children(parent_id)
    elif view == "tree":
        roots = await service.build_tree()
        return CategoryTreeResponse(items=roots, total=len(roots))
    elif view == "roots":
        items = await service.list_roots()
    else:
        items = await service.list_all()
    return CategoryListResponse(items=items, total=len(items))


@router.get("/{category_id}", response_model=CategoryDetailResponse)
async def get_category(
    category_id: str,
    include_children: bool = False,
    include_ancestors: bool = False,
    service: CategoryService = Depends(get_category_service),
):
    """Get a single category, optionally with its direct children and ancestor chain."""
    category = await service.get(category_id)
    if not category:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Category not found",
        )

    response = CategoryDetailResponse(category=category)
    if include_children:
        response.children = await service.get_children(category_id)
    if include_ancestors:
        response.ancestors = await service.get_ancestors(category_id)
    return response


@router.post("", response_model=Category, status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreate,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service),
):
    return await service.create(body)


@router.patch("/{category_id}", response_model=Category)
async def update_category(
    category_id: str,
    body: CategoryUpdate,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service),
):
    """Update a category. Changing slug or parent rewrites the paths of the whole subtree."""
    return await service.update(category_id, body)


@router.delete("/{category_id}", response_model=CategoryDeleteResponse)
async def delete_category(
    category_id: str,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: CategoryService = Depends(get_category_service),
):
    """Delete a category and all its subcategories (409 while products still use them)."""
    deleted_ids = await service.delete(category_id)
    return CategoryDeleteResponse(
        deleted_ids=deleted_ids,
        message=f"Category and {len(deleted_ids) - 1} subcategories deleted",
    )
