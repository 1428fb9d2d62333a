"""
Temporal join of camera events to a scan, and counter history lookup.

A camera event supports a scan when it carries the same plate and its
timestamp falls strictly inside ``anchor +/- window``. When several do,
the most recent one wins.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..fusion.types import AiObservation, AnprObservation
from ..fusion.visual import as_confidence
from ..models.ai_event import AiEvent
from ..models.anpr_event import AnprEvent
from ..models.scan_event import ScanEventRecord


def _ensure_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _raw_confidence(raw_json) -> Optional[float]:
    if not isinstance(raw_json, dict):
        return None
    return as_confidence(raw_json.get("confidence"))


def anpr_confidence(row: AnprEvent) -> Optional[float]:
    value = as_confidence(row.confidence)
    return value if value is not None else _raw_confidence(row.raw_json)


def ai_confidence(row: AiEvent) -> Optional[float]:
    value = as_confidence(row.vehicle_conf)
    return value if value is not None else _raw_confidence(row.raw_json)


def to_anpr_observation(row: AnprEvent) -> AnprObservation:
    return AnprObservation(
        plate=row.plate,
        ts=_ensure_utc(row.ts) if row.ts else None,
        confidence=anpr_confidence(row),
        camera_id=row.camera_id,
        event_id=row.id,
    )


def to_ai_observation(row: AiEvent) -> AiObservation:
    return AiObservation(
        plate=row.plate,
        ts=_ensure_utc(row.ts) if row.ts else None,
        confidence=ai_confidence(row),
        make=row.make,
        model=row.model,
        colour=row.colour,
        camera_id=row.camera_id,
        event_id=row.id,
    )


def _window(anchor: datetime, window_sec: int) -> tuple[datetime, datetime]:
    anchor = _ensure_utc(anchor)
    delta = timedelta(seconds=window_sec)
    return anchor - delta, anchor + delta


def latest_anpr_near(db: Session, plate: Optional[str], anchor: datetime, window_sec: int) -> Optional[AnprEvent]:
    if not plate or window_sec <= 0:
        return None
    start, end = _window(anchor, window_sec)
    return (
        db.query(AnprEvent)
        .filter(AnprEvent.plate == plate, AnprEvent.ts > start, AnprEvent.ts < end)
        .order_by(desc(AnprEvent.ts), desc(AnprEvent.id))
        .first()
    )


def latest_ai_near(db: Session, plate: Optional[str], anchor: datetime, window_sec: int) -> Optional[AiEvent]:
    if not plate or window_sec <= 0:
        return None
    start, end = _window(anchor, window_sec)
    return (
        db.query(AiEvent)
        .filter(AiEvent.plate == plate, AiEvent.ts > start, AiEvent.ts < end)
        .order_by(desc(AiEvent.ts), desc(AiEvent.id))
        .first()
    )


def previous_counter(db: Session, uuid: Optional[str], exclude_scan_id: Optional[int] = None) -> Optional[int]:
    """Counter of the most recent other scan from the same tag, if any."""
    if not uuid:
        return None
    q = db.query(ScanEventRecord.counter).filter(ScanEventRecord.uuid == uuid)
    if exclude_scan_id is not None:
        q = q.filter(ScanEventRecord.id != exclude_scan_id)
    row = q.order_by(desc(ScanEventRecord.created_at), desc(ScanEventRecord.id)).first()
    return row[0] if row else None
