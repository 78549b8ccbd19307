"""Admin notification feed: stock alerts and alert settings."""

from fastapi import APIRouter, Depends, status

from mobileshop.core.deps import get_alert_service, get_current_admin
from mobileshop.schemas.alert import (
    Alert,
    AlertFeed,
    AlertScanResponse,
    AlertSettings,
    AlertSettingsUpdate,
    BulkAlertResponse,
)
from mobileshop.schemas.auth import CurrentAdmin
from mobileshop.services.alerts import AlertService

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=AlertFeed)
async def list_alerts(
    unread_only: bool = False,
    show_dismissed: bool = False,
    include_settings: bool = False,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    """List alerts, critical first. Dismissed alerts are hidden unless show_dismissed."""
    feed = await service.list_alerts(unread_only=unread_only, show_dismissed=show_dismissed)
    if include_settings:
        feed.settings = await service.get_settings()
    return feed


@router.post("/check", response_model=AlertScanResponse)
async def check_alerts(
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    """Scan stock levels and create any missing alerts. Safe to call repeatedly."""
    new_alerts = await service.check_and_generate_alerts()
    return AlertScanResponse(new_alerts=new_alerts, count=len(new_alerts))


@router.put("/settings", response_model=AlertSettings)
async def update_alert_settings(
    body: AlertSettingsUpdate,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    return await service.update_settings(body)


@router.post("/mark-all-read", response_model=BulkAlertResponse)
async def mark_all_read(
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    updated = await service.mark_all_read()
    return BulkAlertResponse(updated=updated, message="All alerts marked as read")


@router.post("/dismiss-all", response_model=BulkAlertResponse)
async def dismiss_all(
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    updated = await service.dismiss_all()
    return BulkAlertResponse(updated=updated, message="All alerts dismissed")


@router.post("/{alert_id}/{action}", response_model=Alert)
async def update_alert(
    alert_id: str,
    action: str,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    """Apply a per-alert action: 'read' or 'dismiss'."""
    return await service.apply_action(alert_id, action)


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_alert(
    alert_id: str,
    current_admin: CurrentAdmin = Depends(get_current_admin),
    service: AlertService = Depends(get_alert_service),
):
    await service.delete(alert_id)
