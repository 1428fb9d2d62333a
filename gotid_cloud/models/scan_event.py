"""
ORM model for forensic scan records.

Rows are written once per physical scan before fusion runs and are never
updated; ``created_at`` is the anchor for camera correlation.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Float, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from . import Base, utc_now


class ScanEventRecord(Base):
    __tablename__ = "scan_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utc_now, nullable=False, index=True)
    ver: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    flags: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    uuid: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    counter: Mapped[int | None] = mapped_column(Integer, nullable=True)
    sig_valid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    chal_valid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    tamper_flag: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    result: Mapped[str | None] = mapped_column(String(32), nullable=True)
    plate: Mapped[str | None] = mapped_column(String(16), nullable=True, index=True)
    vin: Mapped[str | None] = mapped_column(String(32), nullable=True)
    make: Mapped[str | None] = mapped_column(String(64), nullable=True)
    model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    colour: Mapped[str | None] = mapped_column(String(32), nullable=True)
    rssi: Mapped[int | None] = mapped_column(Integer, nullable=True)
    est_distance_m: Mapped[float | None] = mapped_column(Float, nullable=True)
    gps_lat: Mapped[float | None] = mapped_column(Float, nullable=True)
    gps_lon: Mapped[float | None] = mapped_column(Float, nullable=True)
    scanner_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    officer_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    raw_json: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
