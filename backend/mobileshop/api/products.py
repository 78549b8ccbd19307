"""Product catalog endpoints: public reads, admin-only mutations."""

from fastapi import APIRouter, Depends, HTTPException, status

from mobileshop.core.deps import get_current_admin, get_product_service
from mobileshop.schemas.auth import CurrentAdmin
from mobileshop.schemas.product import Product, ProductCreate, ProductListResponse, ProductUpdate
from mobileshop.services.products import ProductService

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=ProductListResponse)
async def list_products(
    category_id: str | None = None,
    service: ProductService = Depends(get_product_service),
):
    items = await service.list_products(category_id=category_id)
    return ProductListResponse(items=items, total=len(items))


@router.get("/{product_id}", response_model=Product)
async def get_product(
    product_id: str,
    service: ProductService = Depends(get_product_service),
):
    product = await service.get(product_id)
    if not product:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Product not found",
        )
    return product


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product(
    body: ProductCreate,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: ProductService = Depends(get_product_service),
):
    return await service.create(body)


@router.patch("/{product_id}", response_model=Product)
async def update_product(
    product_id: str,
    body: ProductUpdate,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: ProductService = Depends(get_product_service),
):
    """Update a product; stock status follows the quantity against the alert threshold."""
    return await service.update(product_id, body)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product(
    product_id: str,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: ProductService = Depends(get_product_service),
):
    await service.delete(product_id)
