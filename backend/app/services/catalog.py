"""
Catalog access for the matcher and the affiliate redirect.

The matcher never queries the database itself: routes load a catalog
snapshot here and pass it in.
"""

import logging
import uuid
from typing import Optional
from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.models import Boot
from app.services.matching import BootRecord

logger = logging.getLogger(__name__)


async def load_catalog(db: AsyncSession) -> list[BootRecord]:
    """Load every boot as a normalised BootRecord, skipping malformed rows."""
    result = await db.execute(select(Boot).order_by(Boot.brand, Boot.model))
    boots = result.scalars().all()

    catalog = []
    for boot in boots:
        try:
            catalog.append(BootRecord.from_model(boot))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed boot {boot.id} ({boot.brand} {boot.model}): {e}")

    return catalog


async def get_catalog(db: AsyncSession = Depends(get_db)) -> list[BootRecord]:
    return await load_catalog(db)


async def boot_exists(
    db: AsyncSession,
    brand: str,
    model: str,
    year: str,
    gender: str,
    exclude_boot_id: Optional[uuid.UUID] = None,
) -> bool:
    """Check for another boot with the same brand, model, year and gender."""
    query = select(Boot.id).where(
        Boot.brand == brand,
        Boot.model == model,
        Boot.year == year,
        Boot.gender == gender,
    )
    if exclude_boot_id is not None:
        query = query.where(Boot.id != exclude_boot_id)

    result = await db.execute(query.limit(1))
    return result.first() is not None


def resolve_affiliate_url(boot: Boot, vendor: Optional[str] = None, region: Optional[str] = None) -> Optional[str]:
    """Pick the vendor's link for the region, falling back to the legacy single URL.

    Links flagged as unavailable are skipped.
    """
    if vendor and region and boot.links:
        for link in boot.links.get(region) or []:
            if link.get("store") == vendor and link.get("available") is not False:
                return link.get("url")

    return boot.affiliate_url
