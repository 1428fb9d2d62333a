from __future__ import annotations

from sqlalchemy import Column, DateTime, Float, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB

from . import Base, utc_now


class AiEvent(Base):
    __tablename__ = "ai_events"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ts = Column(DateTime(timezone=True), nullable=False, default=utc_now, index=True)
    # AI can run even when the plate was unreadable
    plate = Column(Text, nullable=True, index=True)
    camera_id = Column(Text, nullable=True)
    vehicle_conf = Column(Float, nullable=True)
    make = Column(Text, nullable=True)
    model = Column(Text, nullable=True)
    colour = Column(Text, nullable=True)
    raw_json = Column(JSONB, nullable=True)
