"""
ANPR and AI camera event intake.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.orm import Session

from ..fusion.identity import normalize_plate
from ..models import utc_now
from ..models.ai_event import AiEvent
from ..models.anpr_event import AnprEvent
from ..schemas.observation import AiIn, AnprIn
from .errors import IngestRejected

logger = logging.getLogger("observations")

DEFAULT_CAMERA_ID = "C920_CAM"
DEFAULT_ANPR_CONFIDENCE = 0.9


def _plate_text(value: Any) -> str:
    if not value:
        return ""
    return normalize_plate(str(value))


def _event_ts(timestamp: Any) -> datetime:
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        return utc_now()
    try:
        return datetime.fromtimestamp(timestamp, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        raise IngestRejected(400, "invalid_timestamp")


def _raw_payload(payload: AnprIn | AiIn) -> dict:
    if payload.raw is not None:
        return payload.raw
    return payload.model_dump(exclude_none=True)


def ingest_anpr(db: Session, payload: AnprIn) -> AnprEvent:
    plate = _plate_text(payload.plate)
    if not plate:
        raise IngestRejected(400, "missing_plate")
    row = AnprEvent(
        plate=plate,
        ts=_event_ts(payload.timestamp),
        camera_id=payload.camera_id or DEFAULT_CAMERA_ID,
        confidence=DEFAULT_ANPR_CONFIDENCE if payload.confidence is None else payload.confidence,
        raw_json=_raw_payload(payload),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("ANPR inserted id=%s plate=%s camera=%s conf=%s", row.id, row.plate, row.camera_id, row.confidence)
    return row


def ingest_ai(db: Session, payload: AiIn) -> AiEvent:
    row = AiEvent(
        plate=_plate_text(payload.plate) or None,
        ts=_event_ts(payload.timestamp),
        camera_id=payload.camera_id or DEFAULT_CAMERA_ID,
        vehicle_conf=payload.vehicle_conf,
        make=payload.make or None,
        model=payload.model or None,
        colour=payload.colour or None,
        raw_json=_raw_payload(payload),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    logger.info("AI inserted id=%s plate=%s camera=%s conf=%s", row.id, row.plate, row.camera_id, row.vehicle_conf)
    return row
