import logging
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.config import settings
from app.core.database import get_db
from app.models import QuizSession
from app.schemas.quiz import MatchRequest, MatchResponse
from app.services.catalog import get_catalog
from app.services.matching import (
    BootRecord, EmptyCatalogError, LoggingTrace, NoViableCandidatesError, match_boots,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", response_model=MatchResponse)
async def match(
    request: MatchRequest,
    db: AsyncSession = Depends(get_db),
    catalog: list[BootRecord] = Depends(get_catalog),
):
    """Run the matcher for a completed quiz and store the result on the session."""
    trace = LoggingTrace() if settings.MATCH_TRACE else None

    try:
        result = match_boots(request.answers, catalog, trace=trace)
    except EmptyCatalogError as e:
        logger.error("Match requested with an empty catalog")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=str(e),
        )
    except NoViableCandidatesError as e:
        logger.info(f"No viable boots: {e}")
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )

    session = None
    if request.session_id:
        session = await db.get(QuizSession, request.session_id)

    if session is None:
        session = QuizSession()
        if request.session_id:
            session.id = request.session_id
        db.add(session)

    session.answers = request.answers.model_dump(mode="json")
    session.recommended_boots = [boot.model_dump(mode="json") for boot in result.boots]
    session.recommended_mondo = result.recommended_mondo
    session.completed_at = datetime.utcnow()

    await db.commit()
    await db.refresh(session)

    logger.info(
        f"Session {session.id}: {len(result.boots)} boots, "
        f"flex {result.acceptable_flexes}, mondo {result.recommended_mondo}"
    )

    return MatchResponse(
        session_id=session.id,
        recommended_mondo=result.recommended_mondo,
        boots=result.boots,
    )
