import uuid
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from app.core.database import get_db
from app.models import QuizSession
from app.schemas.quiz import SessionResponse, SessionUpdateRequest

router = APIRouter()


async def _get_session_or_404(db: AsyncSession, session_id: uuid.UUID) -> QuizSession:
    session = await db.get(QuizSession, session_id)
    if not session:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session(
    session_id: uuid.UUID,
    db: AsyncSession = Depends(get_db),
):
    return await _get_session_or_404(db, session_id)


@router.patch("/{session_id}", response_model=SessionResponse)
async def update_session(
    session_id: uuid.UUID,
    request: SessionUpdateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Attach a user to an anonymous quiz session (e.g. after sign-in)."""
    session = await _get_session_or_404(db, session_id)
    session.user_id = request.user_id

    await db.commit()
    await db.refresh(session)

    return session
