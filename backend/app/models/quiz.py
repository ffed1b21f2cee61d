import uuid
from datetime import datetime
from typing import Any
from sqlalchemy import String, DateTime
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.database import Base


class QuizSession(Base):
    __tablename__ = "quiz_sessions"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str | None] = mapped_column(String(128), index=True)

    # Quiz data
    answers: Mapped[dict[str, Any]] = mapped_column(JSONB, nullable=False, default=dict)

    # Results
    recommended_boots: Mapped[list[dict[str, Any]] | None] = mapped_column(JSONB)
    recommended_mondo: Mapped[str | None] = mapped_column(String(20))

    # Timestamps
    started_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    breakdowns: Mapped[list["FittingBreakdown"]] = relationship("FittingBreakdown", back_populates="quiz_session")
