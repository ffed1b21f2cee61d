import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Request
from fastapi.responses import RedirectResponse
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.models import AffiliateClick, Boot
from app.services.catalog import resolve_affiliate_url

logger = logging.getLogger(__name__)

router = APIRouter()

COUNTRY_HEADERS = ("cf-ipcountry", "x-vercel-ip-country")


@router.get("")
async def redirect_to_retailer(
    request: Request,
    boot_id: uuid.UUID,
    session_id: Optional[str] = None,
    user_id: Optional[str] = None,
    vendor: Optional[str] = None,
    region: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Record an affiliate click and send the user on to the retailer."""
    boot = await db.get(Boot, boot_id)
    if not boot:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Boot not found",
        )

    affiliate_url = resolve_affiliate_url(boot, vendor, region)
    if not affiliate_url:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No affiliate URL available for this boot",
        )

    country = next((request.headers[h] for h in COUNTRY_HEADERS if request.headers.get(h)), None)

    db.add(AffiliateClick(
        user_id=user_id,
        session_id=session_id,
        country=country,
        user_agent=request.headers.get("user-agent"),
        boot_id=boot.id,
        brand=boot.brand,
        model=boot.model,
        vendor=vendor,
        region=region,
        affiliate_url=affiliate_url,
    ))
    await db.commit()

    logger.info(f"Affiliate click: {boot.brand} {boot.model} -> {vendor or 'default'} ({region or '-'})")

    return RedirectResponse(affiliate_url, status_code=status.HTTP_302_FOUND)
