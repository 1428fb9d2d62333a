"""
ORM model for persisted fusion results, one per scan unless de-duplicated.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from . import Base, utc_now


class FusionEvent(Base):
    __tablename__ = "fusion_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    plate: Mapped[str | None] = mapped_column(String(16), nullable=True, index=True)
    scan_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("scan_events.id", ondelete="CASCADE"), nullable=True)
    anpr_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    ai_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    fusion_verdict: Mapped[str] = mapped_column(String(32), nullable=False, index=True)
    final_label: Mapped[str] = mapped_column(String(32), nullable=False)
    visual_confidence: Mapped[str] = mapped_column(String(16), nullable=False, default="NONE")
    has_gotid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    registry_status: Mapped[str | None] = mapped_column(String(32), nullable=True)
    reasons: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    raw_json: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
