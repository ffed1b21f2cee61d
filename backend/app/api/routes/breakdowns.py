import uuid
import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.database import get_db
from app.models import FittingBreakdown, QuizSession
from app.schemas.breakdown import BreakdownGenerateRequest, BreakdownGenerateResponse, BreakdownResponse
from app.schemas.quiz import QuizAnswers
from app.services.breakdown import count_words, generate_breakdown
from app.services.llm_provider import LLMProvider, get_llm_provider

logger = logging.getLogger(__name__)

router = APIRouter()


async def _find_breakdown(db: AsyncSession, user_id: str, quiz_id: uuid.UUID) -> Optional[FittingBreakdown]:
    result = await db.execute(
        select(FittingBreakdown).where(
            FittingBreakdown.user_id == user_id,
            FittingBreakdown.quiz_id == quiz_id,
        )
    )
    return result.scalar_one_or_none()


@router.post("/generate", response_model=BreakdownGenerateResponse)
async def generate(
    request: BreakdownGenerateRequest,
    db: AsyncSession = Depends(get_db),
    provider: LLMProvider = Depends(get_llm_provider),
):
    """Generate (or return the stored) fitting breakdown for a completed quiz."""
    existing = await _find_breakdown(db, request.user_id, request.quiz_id)
    if existing and existing.sections:
        return BreakdownGenerateResponse(
            success=True,
            message="Breakdown already generated",
            breakdown=BreakdownResponse.model_validate(existing),
        )

    session = await db.get(QuizSession, request.quiz_id)
    if not session or not session.answers or not session.recommended_boots:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found or incomplete",
        )

    try:
        answers = QuizAnswers.model_validate(session.answers)
    except ValidationError as e:
        logger.error(f"Stored answers for session {session.id} are invalid: {e}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found or incomplete",
        )

    boots = session.recommended_boots
    if request.selected_boot_ids:
        selected = set(request.selected_boot_ids)
        boots = [boot for boot in boots if boot.get("boot_id") in selected]
        if not boots:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="None of the selected boots are in this session",
            )

    sections = await generate_breakdown(provider, answers, boots, settings.BREAKDOWN_LANGUAGE)
    if not sections:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Failed to generate breakdown: AI returned no sections",
        )

    breakdown = FittingBreakdown(
        user_id=request.user_id,
        quiz_id=request.quiz_id,
        language=settings.BREAKDOWN_LANGUAGE,
        model_provider=provider.name,
        model_name=provider.model,
        word_count=count_words(sections),
        sections=[section.model_dump() for section in sections],
        generated_at=datetime.utcnow(),
    )

    try:
        db.add(breakdown)
        await db.commit()
    except SQLAlchemyError as e:
        # The user still sees this breakdown; it is lost on refresh
        await db.rollback()
        logger.error(f"Failed to save breakdown for user {request.user_id}, quiz {request.quiz_id}: {e}")

    return BreakdownGenerateResponse(
        success=True,
        message="Breakdown generated successfully",
        breakdown=BreakdownResponse.model_validate(breakdown),
    )


@router.get("/{user_id}/{quiz_id}", response_model=BreakdownResponse)
async def get_breakdown(
    user_id: str,
    quiz_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    breakdown = await _find_breakdown(db, user_id, quiz_id)
    if not breakdown:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Breakdown not found",
        )
    return breakdown
