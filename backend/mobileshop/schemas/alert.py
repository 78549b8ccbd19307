"""Alert and alert-settings schemas."""

import enum
from datetime import datetime

from pydantic import Field

from mobileshop.schemas.common import CamelModel


class AlertType(str, enum.Enum):
    LOW_STOCK = "low_stock"
    OUT_OF_STOCK = "out_of_stock"
    EXPIRING_ANNOUNCEMENT = "expiring_announcement"
    CUSTOM = "custom"


class AlertPriority(str, enum.Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


PRIORITY_RANK: dict[AlertPriority, int] = {
    AlertPriority.CRITICAL: 0,
    AlertPriority.HIGH: 1,
    AlertPriority.MEDIUM: 2,
    AlertPriority.LOW: 3,
}


class AlertAction(str, enum.Enum):
    READ = "read"
    DISMISS = "dismiss"


class Alert(CamelModel):
    id: str
    type: AlertType
    product_id: str | None = None
    product_name: str | None = None
    current_stock: int | None = None
    threshold: int = 0
    message: str
    priority: AlertPriority
    is_read: bool = False
    is_dismissed: bool = False
    created_at: datetime


class ProductAlertSetting(CamelModel):
    product_id: str
    low_stock_threshold: int = Field(..., ge=0)
    is_enabled: bool = True


class AlertSettings(CamelModel):
    global_low_stock_threshold: int = Field(10, ge=0)
    enable_low_stock_alerts: bool = True
    enable_out_of_stock_alerts: bool = True
    product_settings: list[ProductAlertSetting] = Field(default_factory=list)


class AlertSettingsUpdate(CamelModel):
    """Partial settings update; product overrides are merged by productId."""
    global_low_stock_threshold: int | None = Field(None, ge=0)
    enable_low_stock_alerts: bool | None = None
    enable_out_of_stock_alerts: bool | None = None
    product_settings: list[ProductAlertSetting] | None = None


class AlertFeed(CamelModel):
    alerts: list[Alert]
    unread_count: int
    settings: AlertSettings | None = None


class AlertScanResponse(CamelModel):
    new_alerts: list[Alert]
    count: int


class BulkAlertResponse(CamelModel):
    updated: int
    message: str
