from mobileshop.schemas.category import (
    Category, CategoryNode, CategoryCreate, CategoryUpdate,
)
from mobileshop.schemas.product import (
    Product, ProductCreate, ProductUpdate, StockStatus,
)
from mobileshop.schemas.alert import (
    Alert, AlertAction, AlertPriority, AlertSettings, AlertSettingsUpdate, AlertType,
    ProductAlertSetting,
)

__all__ = [
    "Category", "CategoryNode", "CategoryCreate", "CategoryUpdate",
    "Product", "ProductCreate", "ProductUpdate", "StockStatus",
    "Alert", "AlertAction", "AlertPriority", "AlertSettings", "AlertSettingsUpdate", "AlertType",
    "ProductAlertSetting",
]
