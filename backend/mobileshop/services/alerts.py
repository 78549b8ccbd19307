"""Low-stock / out-of-stock notification feed for the admin panel."""

import logging
import uuid

from mobileshop.core.exceptions import InvalidOperationError, NotFoundError
from mobileshop.db.store import Collection, DocumentStore
from mobileshop.schemas.alert import (
    PRIORITY_RANK,
    Alert,
    AlertAction,
    AlertFeed,
    AlertPriority,
    AlertSettings,
    AlertSettingsUpdate,
    AlertType,
)
from mobileshop.schemas.common import utcnow
from mobileshop.schemas.product import StockItem

logger = logging.getLogger(__name__)

SETTINGS_DOC_ID = "global"


def _new_id() -> str:
    return f"alert-{uuid.uuid4().hex[:12]}"


def resolve_threshold(product_id: str, settings: AlertSettings) -> int:
    """An enabled per-product override wins over the global threshold."""
    for override in settings.product_settings:
        if override.product_id == product_id and override.is_enabled:
            return override.low_stock_threshold
    return settings.global_low_stock_threshold


def sort_alerts(alerts: list[Alert]) -> list[Alert]:
    """Critical first, newest first within the same priority."""
    newest_first = sorted(alerts, key=lambda a: a.created_at, reverse=True)
    return sorted(newest_first, key=lambda a: PRIORITY_RANK[a.priority])


class AlertService:
    def __init__(self, store: DocumentStore, default_threshold: int = 10):
        self.store = store
        self.default_threshold = default_threshold

    # ── Settings ───────────────────────────────────

    async def get_settings(self) -> AlertSettings:
        doc = await self.store.find_by_id(Collection.ALERT_SETTINGS, SETTINGS_DOC_ID)
        if doc is None:
            return AlertSettings(global_low_stock_threshold=self.default_threshold)
        return AlertSettings.model_validate(doc)

    async def update_settings(self, patch: AlertSettingsUpdate) -> AlertSettings:
        current = await self.get_settings()
        changes = patch.model_dump(exclude_unset=True, exclude={"product_settings"})
        changes = {k: v for k, v in changes.items() if v is not None}

        overrides = {o.product_id: o for o in current.product_settings}
        for override in patch.product_settings or []:
            overrides[override.product_id] = override
        changes["product_settings"] = list(overrides.values())

        updated = current.model_copy(update=changes)
        await self.store.replace_many(
            Collection.ALERT_SETTINGS,
            [{"id": SETTINGS_DOC_ID, **updated.to_document()}],
        )
        logger.info(
            f"Alert settings updated: threshold={updated.global_low_stock_threshold} "
            f"low_stock={updated.enable_low_stock_alerts} "
            f"out_of_stock={updated.enable_out_of_stock_alerts}"
        )
        return updated

    # ── Scan ───────────────────────────────────────

    def _evaluate(self, product: StockItem, settings: AlertSettings, now) -> Alert | None:
        quantity = product.stock_quantity
        if settings.enable_out_of_stock_alerts and quantity == 0:
            return Alert(
                id=_new_id(),
                type=AlertType.OUT_OF_STOCK,
                product_id=product.id,
                product_name=product.label,
                current_stock=0,
                threshold=0,
                message=f"{product.label} is out of stock",
                priority=AlertPriority.CRITICAL,
                created_at=now,
            )

        threshold = resolve_threshold(product.id, settings)
        if settings.enable_low_stock_alerts and 0 < quantity <= threshold:
            priority = AlertPriority.HIGH if quantity <= threshold / 2 else AlertPriority.MEDIUM
            return Alert(
                id=_new_id(),
                type=AlertType.LOW_STOCK,
                product_id=product.id,
                product_name=product.label,
                current_stock=quantity,
                threshold=threshold,
                message=f"{product.label} is low on stock ({quantity} remaining, threshold {threshold})",
                priority=priority,
                created_at=now,
            )
        return None

    async def check_and_generate_alerts(self) -> list[Alert]:
        """Scan tracked products and create alerts for low/out-of-stock items.

        An alert is not created while a non-dismissed alert with the same
        (productId, type) exists, so repeated scans are idempotent.
        """
        settings = await self.get_settings()
        if not (settings.enable_low_stock_alerts or settings.enable_out_of_stock_alerts):
            return []

        products = [StockItem.model_validate(doc) for doc in await self.store.find_all(Collection.PRODUCTS)]
        existing = [Alert.model_validate(doc) for doc in await self.store.find_all(Collection.ALERTS)]
        live = {(a.product_id, a.type) for a in existing if not a.is_dismissed and a.product_id}

        now = utcnow()
        new_alerts: list[Alert] = []
        for product in products:
            if product.stock_quantity is None:
                continue
            alert = self._evaluate(product, settings, now)
            if alert is None or (product.id, alert.type) in live:
                continue
            live.add((product.id, alert.type))
            new_alerts.append(alert)

        if new_alerts:
            await self.store.replace_many(Collection.ALERTS, [a.to_document() for a in new_alerts])
        logger.info(f"Stock scan: {len(products)} product(s), {len(new_alerts)} new alert(s)")
        return new_alerts

    # ── Listing ────────────────────────────────────

    async def list_alerts(self, unread_only: bool = False, show_dismissed: bool = False) -> AlertFeed:
        alerts = [Alert.model_validate(doc) for doc in await self.store.find_all(Collection.ALERTS)]
        if unread_only:
            alerts = [a for a in alerts if not a.is_read]
        if not show_dismissed:
            alerts = [a for a in alerts if not a.is_dismissed]
        alerts = sort_alerts(alerts)
        unread = sum(1 for a in alerts if not a.is_read and not a.is_dismissed)
        return AlertFeed(alerts=alerts, unread_count=unread)

    # ── State transitions ──────────────────────────

    async def _set_flags(self, alert_id: str, **flags) -> Alert:
        doc = await self.store.find_by_id(Collection.ALERTS, alert_id)
        if doc is None:
            raise NotFoundError(f"Alert '{alert_id}' not found")
        alert = Alert.model_validate(doc).model_copy(update=flags)
        await self.store.replace_many(Collection.ALERTS, [alert.to_document()])
        return alert

    async def mark_read(self, alert_id: str) -> Alert:
        return await self._set_flags(alert_id, is_read=True)

    async def dismiss(self, alert_id: str) -> Alert:
        return await self._set_flags(alert_id, is_dismissed=True)

    async def apply_action(self, alert_id: str, action: str) -> Alert:
        try:
            action = AlertAction(action)
        except ValueError:
            raise InvalidOperationError(f"Invalid alert action '{action}'")
        if action is AlertAction.READ:
            return await self.mark_read(alert_id)
        return await self.dismiss(alert_id)

    async def _set_flag_on_all(self, flag: str) -> int:
        alerts = [Alert.model_validate(doc) for doc in await self.store.find_all(Collection.ALERTS)]
        changed = [a.model_copy(update={flag: True}) for a in alerts if not getattr(a, flag)]
        await self.store.replace_many(Collection.ALERTS, [a.to_document() for a in changed])
        return len(changed)

    async def mark_all_read(self) -> int:
        return await self._set_flag_on_all("is_read")

    async def dismiss_all(self) -> int:
        count = await self._set_flag_on_all("is_dismissed")
        logger.info(f"Dismissed {count} alert(s)")
        return count

    async def dismiss_for_product(self, product_id: str) -> int:
        """Dismiss every live alert raised for one product."""
        docs = await self.store.find_by_field(Collection.ALERTS, "productId", product_id)
        changed = [
            a.model_copy(update={"is_dismissed": True})
            for a in (Alert.model_validate(doc) for doc in docs)
            if not a.is_dismissed
        ]
        await self.store.replace_many(Collection.ALERTS, [a.to_document() for a in changed])
        return len(changed)

    async def delete(self, alert_id: str) -> None:
        removed = await self.store.delete_many(Collection.ALERTS, [alert_id])
        if not removed:
            raise NotFoundError(f"Alert '{alert_id}' not found")
        logger.info(f"Alert deleted: {alert_id}")
