import secrets
from typing import Optional
from fastapi import Header, HTTPException, status
from app.core.config import settings


async def get_current_admin(x_admin_key: Optional[str] = Header(default=None)) -> str:
    """Require the shared admin key on catalog management routes."""
    if not settings.ADMIN_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin access is not configured",
        )

    if not x_admin_key or not secrets.compare_digest(x_admin_key, settings.ADMIN_API_KEY):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid admin key",
        )

    return "admin"
