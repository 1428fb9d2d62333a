"""
SQLAlchemy model base class for the GOT-ID Cloud backend.

This package defines ORM models for the vehicle registry, forensic scan
records, ANPR and AI camera events, and persisted fusion results. All
models inherit from the declarative `Base` defined here.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import JSON
from sqlalchemy.ext.compiler import compiles
from sqlalchemy.dialects.postgresql import JSONB


@compiles(JSONB, "sqlite")
def _compile_jsonb_sqlite(type_, compiler, **kw):
    return compiler.process(JSON(), **kw)


from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy ORM models."""

    pass


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


from .vehicle import Vehicle  # noqa: E402,F401
from .scan_event import ScanEventRecord  # noqa: E402,F401
from .anpr_event import AnprEvent  # noqa: E402,F401
from .ai_event import AiEvent  # noqa: E402,F401
from .fusion_event import FusionEvent  # noqa: E402,F401

__all__ = [
    "Base",
    "utc_now",

    # Registry
    "Vehicle",

    # Observations
    "ScanEventRecord",
    "AnprEvent",
    "AiEvent",

    # Verdicts
    "FusionEvent",
]
