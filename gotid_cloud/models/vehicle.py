"""
ORM model for the GOT-ID vehicle registry.

One row per plate. ``public_key`` holds the tag's raw EC public key as
uppercase hex, with or without the ``04`` prefix.
"""

from __future__ import annotations

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from . import Base


class Vehicle(Base):
    __tablename__ = "vehicles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    plate: Mapped[str] = mapped_column(String(16), unique=True, nullable=False)
    vin: Mapped[str | None] = mapped_column(String(32), nullable=True)
    make: Mapped[str | None] = mapped_column(String(64), nullable=True)
    model: Mapped[str | None] = mapped_column(String(128), nullable=True)
    colour: Mapped[str | None] = mapped_column(String(32), nullable=True)
    gotid_uuid: Mapped[str | None] = mapped_column(String(128), nullable=True)
    public_key: Mapped[str | None] = mapped_column(String(300), unique=True, nullable=True, index=True)
    # NULL means enrollment was never recorded
    has_gotid: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    status: Mapped[str | None] = mapped_column(String(32), nullable=True, default="ACTIVE")
    raw_json: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
