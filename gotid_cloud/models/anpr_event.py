from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB

from . import Base, utc_now


class AnprEvent(Base):
    __tablename__ = "anpr_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ts = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    plate = Column(Text, nullable=False, index=True)
    camera_id = Column(Text, nullable=True)
    confidence = Column(Float, nullable=True)
    raw_json = Column(JSONB, nullable=True)
