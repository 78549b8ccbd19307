"""Thin product catalog used by the category and alert features."""

import logging
import uuid

from mobileshop.core.exceptions import NotFoundError
from mobileshop.db.store import Collection, DocumentStore
from mobileshop.schemas.alert import AlertSettings
from mobileshop.schemas.common import utcnow
from mobileshop.schemas.product import Product, ProductCreate, ProductUpdate, StockStatus
from mobileshop.services.alerts import AlertService, resolve_threshold

logger = logging.getLogger(__name__)


def derive_stock_status(product: Product, settings: AlertSettings) -> StockStatus:
    """Stock status implied by the tracked quantity. Untracked items count as in stock; coming-soon is kept."""
    quantity = product.stock_quantity
    if product.stock_status is StockStatus.COMING_SOON:
        return product.stock_status
    if quantity is None:
        return StockStatus.IN_STOCK
    if quantity == 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= resolve_threshold(product.id, settings):
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


class ProductService:
    def __init__(self, store: DocumentStore, alerts: AlertService):
        self.store = store
        self.alerts = alerts

    async def _ensure_category(self, category_id: str | None) -> None:
        if category_id is None:
            return
        if await self.store.find_by_id(Collection.CATEGORIES, category_id) is None:
            raise NotFoundError(f"Category '{category_id}' not found")

    async def list_products(self, category_id: str | None = None) -> list[Product]:
        if category_id is not None:
            docs = await self.store.find_by_field(Collection.PRODUCTS, "category", category_id)
        else:
            docs = await self.store.find_all(Collection.PRODUCTS)
        products = [Product.model_validate(doc) for doc in docs]
        products.sort(key=lambda p: p.name.lower())
        return products

    async def get(self, product_id: str) -> Product | None:
        doc = await self.store.find_by_id(Collection.PRODUCTS, product_id)
        return Product.model_validate(doc) if doc else None

    async def create(self, data: ProductCreate) -> Product:
        await self._ensure_category(data.category)
        now = utcnow()
        product = Product(
            id=f"prod-{uuid.uuid4().hex[:12]}",
            **data.model_dump(exclude={"stock_status"}),
            stock_status=data.stock_status or StockStatus.IN_STOCK,
            created_at=now,
            updated_at=now,
        )
        settings = await self.alerts.get_settings()
        product.stock_status = derive_stock_status(product, settings)
        await self.store.insert(Collection.PRODUCTS, product.to_document())
        logger.info(f"Product created: {product.id} ({product.name})")
        return product

    async def update(self, product_id: str, patch: ProductUpdate) -> Product:
        current = await self.get(product_id)
        if current is None:
            raise NotFoundError(f"Product '{product_id}' not found")

        changes = patch.model_dump(exclude_unset=True)
        # stockQuantity and category accept null (untracked / uncategorised)
        changes = {
            k: v for k, v in changes.items()
            if v is not None or k in ("stock_quantity", "category")
        }
        if "category" in changes:
            await self._ensure_category(changes["category"])

        updated = current.model_copy(update={**changes, "updated_at": utcnow()})
        if "stock_quantity" in changes or "stock_status" in changes:
            settings = await self.alerts.get_settings()
            updated.stock_status = derive_stock_status(updated, settings)

        await self.store.replace_many(Collection.PRODUCTS, [updated.to_document()])
        return updated

    async def delete(self, product_id: str) -> None:
        removed = await self.store.delete_many(Collection.PRODUCTS, [product_id])
        if not removed:
            raise NotFoundError(f"Product '{product_id}' not found")
        await self.alerts.dismiss_for_product(product_id)
        logger.info(f"Product deleted: {product_id}")
