import uuid
from datetime import datetime
from typing import Any
from sqlalchemy import String, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship
from app.core.database import Base


class FittingBreakdown(Base):
    __tablename__ = "fitting_breakdowns"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)
    user_id: Mapped[str] = mapped_column(String(128), nullable=False)
    quiz_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("quiz_sessions.id", ondelete="CASCADE"), nullable=False)

    # Generation metadata
    language: Mapped[str] = mapped_column(String(10), default="en-GB")
    model_provider: Mapped[str] = mapped_column(String(50), nullable=False)
    model_name: Mapped[str] = mapped_column(String(100), nullable=False)
    word_count: Mapped[int] = mapped_column(Integer, default=0)

    # [{"boot_id": ..., "heading": ..., "body": ...}]
    sections: Mapped[list[dict[str, Any]]] = mapped_column(JSONB, nullable=False)

    generated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    quiz_session: Mapped["QuizSession"] = relationship("QuizSession", back_populates="breakdowns")

    __table_args__ = (UniqueConstraint("user_id", "quiz_id", name="uq_breakdown_user_quiz"),)
