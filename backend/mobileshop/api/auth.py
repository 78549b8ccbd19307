"""Authentication endpoints for the single admin account."""

import logging
import secrets

from fastapi import APIRouter, Depends, HTTPException, status

from mobileshop.core.config import settings
from mobileshop.core.deps import get_current_admin
from mobileshop.core.security import create_access_token, verify_password
from mobileshop.schemas.auth import CurrentAdmin, LoginRequest, TokenResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest):
    """Authenticate the admin via username + password, return JWT."""
    username_ok = secrets.compare_digest(body.username.encode(), settings.ADMIN_USERNAME.encode())
    password_ok = verify_password(body.password, settings.ADMIN_PASSWORD_HASH)
    if not (username_ok and password_ok):
        logger.warning(f"Failed admin login for '{body.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid username or password",
        )

    token = create_access_token(username=body.username, role="admin")
    return TokenResponse(access_token=token, username=body.username, role="admin")


@router.get("/me", response_model=CurrentAdmin)
async def get_me(current_admin: CurrentAdmin = Depends(get_current_admin)):
    return current_admin
