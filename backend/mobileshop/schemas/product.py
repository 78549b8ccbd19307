import enum
from datetime import datetime

from pydantic import Field

from mobileshop.schemas.common import CamelModel, utcnow


class StockStatus(str, enum.Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    COMING_SOON = "coming_soon"


class Product(CamelModel):
    id: str
    name: str
    category: str | None = None
    price: float = 0
    description: str = ""
    image: str = ""
    published: bool = True
    stock_quantity: int | None = None  # None = stock not tracked
    stock_status: StockStatus = StockStatus.IN_STOCK
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)


class StockItem(CamelModel):
    """The slice of a product document the stock scan reads."""

    id: str
    name: str = ""
    stock_quantity: int | None = None

    @property
    def label(self) -> str:
        return self.name or self.id


class ProductCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    category: str | None = None
    price: float = Field(0, ge=0)
    description: str = ""
    image: str = ""
    published: bool = True
    stock_quantity: int | None = Field(None, ge=0)
    stock_status: StockStatus | None = None


class ProductUpdate(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    category: str | None = None
    price: float | None = Field(None, ge=0)
    description: str | None = None
    image: str | None = None
    published: bool | None = None
    stock_quantity: int | None = Field(None, ge=0)
    stock_status: StockStatus | None = None


class ProductListResponse(CamelModel):
    items: list[Product]
    total: int
