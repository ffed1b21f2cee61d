import uuid
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from app.core.database import get_db
from app.core.security import get_current_admin
from app.models import AffiliateClick, Boot, FittingBreakdown, QuizSession
from app.schemas.admin import AnalyticsOverview
from app.schemas.boot import BootCreate, BootResponse, BootUpdate
from app.services.catalog import boot_exists

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(get_current_admin)])


async def _get_boot_or_404(db: AsyncSession, boot_id: uuid.UUID) -> Boot:
    boot = await db.get(Boot, boot_id)
    if not boot:
        raise HTTPException(status_code=404, detail="Boot not found")
    return boot


# Boot catalog endpoints
@router.get("/boots", response_model=list[BootResponse])
async def list_boots(
    brand: Optional[str] = None,
    gender: Optional[str] = None,
    limit: int = Query(default=100, le=500),
    page: int = 1,
    db: AsyncSession = Depends(get_db),
):
    """List catalog boots, optionally filtered by brand and gender."""
    query = select(Boot)

    if brand:
        query = query.where(func.lower(Boot.brand) == brand.lower())
    if gender:
        query = query.where(Boot.gender == gender)

    offset = (page - 1) * limit
    query = query.order_by(Boot.brand, Boot.model).offset(offset).limit(limit)

    result = await db.execute(query)
    return result.scalars().all()


@router.get("/boots/{boot_id}", response_model=BootResponse)
async def get_boot(
    boot_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await _get_boot_or_404(db, boot_id)


@router.post("/boots", response_model=BootResponse, status_code=status.HTTP_201_CREATED)
async def create_boot(
    request: BootCreate,
    db: AsyncSession = Depends(get_db),
):
    """Add a boot to the catalog."""
    data = request.model_dump(mode="json")

    if await boot_exists(db, data["brand"], data["model"], data["year"], data["gender"]):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"{data['brand']} {data['model']} ({data['year']}, {data['gender']}) already exists",
        )

    boot = Boot(**data)
    db.add(boot)
    await db.commit()
    await db.refresh(boot)

    logger.info(f"Created boot {boot.id}: {boot.brand} {boot.model}")
    return boot


@router.put("/boots/{boot_id}", response_model=BootResponse)
async def update_boot(
    boot_id: uuid.UUID,
    request: BootUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Update a boot. Only the fields sent are changed."""
    boot = await _get_boot_or_404(db, boot_id)

    update_data = request.model_dump(mode="json", exclude_unset=True)

    identity = {
        key: update_data.get(key, getattr(boot, key))
        for key in ("brand", "model", "year", "gender")
    }
    if identity != {key: getattr(boot, key) for key in identity}:
        if await boot_exists(db, exclude_boot_id=boot.id, **identity):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Another boot with this brand, model, year and gender already exists",
            )

    for field, value in update_data.items():
        setattr(boot, field, value)

    await db.commit()
    await db.refresh(boot)

    return boot


@router.delete("/boots/{boot_id}")
async def delete_boot(
    boot_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    boot = await _get_boot_or_404(db, boot_id)

    await db.delete(boot)
    await db.commit()

    logger.info(f"Deleted boot {boot_id}: {boot.brand} {boot.model}")
    return {"success": True}


# Analytics endpoints
async def _count(db: AsyncSession, model, *criteria) -> int:
    query = select(func.count()).select_from(model)
    if criteria:
        query = query.where(*criteria)
    result = await db.execute(query)
    return result.scalar() or 0


@router.get("/metrics", response_model=AnalyticsOverview)
async def get_metrics(
    db: AsyncSession = Depends(get_db),
):
    """Catalog and funnel counts for the admin dashboard."""
    return AnalyticsOverview(
        total_boots=await _count(db, Boot),
        total_sessions=await _count(db, QuizSession),
        completed_sessions=await _count(db, QuizSession, QuizSession.completed_at.is_not(None)),
        total_breakdowns=await _count(db, FittingBreakdown),
        total_affiliate_clicks=await _count(db, AffiliateClick),
    )
