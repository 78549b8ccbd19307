"""Dependency injection: admin auth guard and per-request services."""

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from mobileshop.core.config import settings
from mobileshop.core.security import decode_access_token
from mobileshop.db.store import DocumentStore
from mobileshop.schemas.auth import CurrentAdmin
from mobileshop.services.alerts import AlertService
from mobileshop.services.categories import CategoryService
from mobileshop.services.products import ProductService

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login")


async def get_current_admin(token: str = Depends(oauth2_scheme)) -> CurrentAdmin:
    """Decode JWT and return the admin. Raises 401 on invalid/expired token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = decode_access_token(token)
        username = payload.get("sub")
        if username is None:
            raise credentials_exception
        role = payload["role"]
    except (JWTError, KeyError):
        raise credentials_exception

    if role != "admin":
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Role '{role}' not allowed. Required: admin",
        )
    return CurrentAdmin(username=username, role=role)


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_alert_service(store: DocumentStore = Depends(get_store)) -> AlertService:
    return AlertService(store, default_threshold=settings.DEFAULT_LOW_STOCK_THRESHOLD)


def get_category_service(store: DocumentStore = Depends(get_store)) -> CategoryService:
    return CategoryService(store)


def get_product_service(
    store: DocumentStore = Depends(get_store),
    alerts: AlertService = Depends(get_alert_service),
) -> ProductService:
    return ProductService(store, alerts)
