import uuid
from datetime import datetime
from typing import Any
from sqlalchemy import String, Integer, Boolean, DateTime, Numeric, Text, ARRAY, JSON, UniqueConstraint
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column
from app.core.database import Base


class Boot(Base):
    __tablename__ = "boots"

    id: Mapped[uuid.UUID] = mapped_column(primary_key=True, default=uuid.uuid4)

    # Identity
    year: Mapped[str] = mapped_column(String(10), nullable=False)  # e.g. '25/26'
    gender: Mapped[str] = mapped_column(String(10), nullable=False)  # 'Male', 'Female'
    brand: Mapped[str] = mapped_column(String(100), nullable=False)
    model: Mapped[str] = mapped_column(String(200), nullable=False)

    # Plain string ('Freestyle') or a legacy object of booleans ({"freestyle": true})
    boot_type: Mapped[Any] = mapped_column(JSON)

    # Fit
    flex: Mapped[int] = mapped_column(Integer, nullable=False)
    last_width_mm: Mapped[float] = mapped_column(Numeric(5, 1, asdecimal=False), nullable=False)
    toe_box_shape: Mapped[str | None] = mapped_column(String(20))  # 'Round', 'Square', 'Angled'
    instep_height: Mapped[str | None] = mapped_column(String(20))  # 'Low', 'Medium', 'High'
    ankle_volume: Mapped[str | None] = mapped_column(String(20))
    calf_volume: Mapped[str | None] = mapped_column(String(20))

    # Features
    walk_mode: Mapped[bool] = mapped_column(Boolean, default=False)
    rear_entry: Mapped[bool] = mapped_column(Boolean, default=False)
    calf_adjustment: Mapped[bool] = mapped_column(Boolean, default=False)

    # Retail
    affiliate_url: Mapped[str | None] = mapped_column(String(1000))  # Legacy single link
    links: Mapped[dict[str, Any] | None] = mapped_column(JSONB)  # {"UK": [{"store": ..., "url": ...}]}
    image_url: Mapped[str | None] = mapped_column(String(500))
    tags: Mapped[list[str] | None] = mapped_column(ARRAY(Text))

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        UniqueConstraint("brand", "model", "year", "gender", name="uq_boot_identity"),
    )
