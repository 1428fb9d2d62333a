"""
Scan ingestion pipeline.

A scanner posts one loosely typed JSON body per physical scan. This module
sanitizes it, writes the forensic ``scan_events`` row, resolves the tag
identity against the registry, joins nearby camera events, runs the
fusion engine and stores the resulting ``fusion_events`` row. Everything
happens in one transaction.
"""

from __future__ import annotations

import json
import logging
import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Optional

from sqlalchemy import desc
from sqlalchemy.orm import Session

from ..core.config import settings
from ..fusion import decide_fusion, resolve_identity
from ..fusion.identity import IdentityResolution, is_hex, normalize_hex, normalize_plate
from ..fusion.types import FusedResult, FusionVerdict, ScanEvent
from ..models import utc_now
from ..models.ai_event import AiEvent
from ..models.anpr_event import AnprEvent
from ..models.fusion_event import FusionEvent
from ..models.scan_event import ScanEventRecord
from ..models.vehicle import Vehicle
from .correlation import latest_ai_near, latest_anpr_near, previous_counter, to_ai_observation, to_anpr_observation
from .errors import IngestRejected
from .registry import SqlRegistry

logger = logging.getLogger("scan_ingest")

MAX_UUID_LEN = 128
MAX_PLATE_LEN = 16
MAX_SCANNER_ID_LEN = 64
MAX_OFFICER_ID_LEN = 64
MAX_VIN_LEN = 32
MAX_MAKE_LEN = 64
MAX_MODEL_LEN = 128
MAX_COLOUR_LEN = 32
MAX_PUBKEY_LEN = 300
MAX_RESULT_LEN = 32
COUNTER_MAX = 2_000_000_000

_TRUE_WORDS = {"true", "1", "yes"}
_FALSE_WORDS = {"false", "0", "no"}


def _as_str(value: Any, max_len: int, fallback: Optional[str] = None) -> Optional[str]:
    if value is None:
        return fallback
    text = str(value)
    if not text:
        return fallback
    return text[:max_len]


def _as_bool(value: Any, fallback: Optional[bool]) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        word = value.strip().lower()
        if word in _TRUE_WORDS:
            return True
        if word in _FALSE_WORDS:
            return False
    return fallback


def _as_number(value: Any) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _clamp_int(value: Any, low: int, high: int, fallback: int) -> int:
    number = _as_number(value)
    result = int(number) if number is not None else fallback
    return min(high, max(low, result))


def _clamp_float(value: Any, low: float, high: float) -> Optional[float]:
    if value is None:
        return None
    number = _as_number(value)
    if number is None:
        return None
    return min(high, max(low, number))


def _json_size_bytes(obj: Any) -> float:
    try:
        return len(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))
    except (TypeError, ValueError):
        return math.inf


@dataclass
class SanitizedScan:
    raw_json: dict
    plate: str
    uuid: Optional[str]
    counter: int
    sig_valid: bool
    chal_valid: bool
    tamper: bool
    pubkey_match: Optional[bool]
    pubkey_hex: str
    result: str
    rssi: Optional[int] = None
    est_distance_m: Optional[float] = None
    gps_lat: Optional[float] = None
    gps_lon: Optional[float] = None
    scanner_id: Optional[str] = None
    officer_id: Optional[str] = None
    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    colour: Optional[str] = None

    @property
    def has_identity(self) -> bool:
        return bool(self.pubkey_hex)


def sanitize_scan(body: dict, *, max_raw_json_bytes: Optional[int] = None) -> SanitizedScan:
    """
    Normalize a scanner body into bounded, typed fields.

    Raises ``IngestRejected`` for an oversized ``raw_json`` (413) or a
    non-hex ``pubkey_hex`` (400). Without a captured public key the
    signature and challenge results are forced to false.
    """
    limit = settings.max_raw_json_bytes if max_raw_json_bytes is None else max_raw_json_bytes
    raw = body.get("raw_json")
    raw = raw if isinstance(raw, dict) else {}
    if _json_size_bytes(raw) > limit:
        raise IngestRejected(413, "raw_json too large")

    pubkey_source = raw.get("pubkey_hex")
    if pubkey_source is None:
        pubkey_source = body.get("pubkey_hex")
    pubkey_hex = normalize_hex(_as_str(pubkey_source, MAX_PUBKEY_LEN, ""))
    if pubkey_hex and not is_hex(pubkey_hex):
        raise IngestRejected(400, "pubkey_hex malformed (non-hex)")

    has_identity = bool(pubkey_hex)
    tamper_source = body.get("tamper")
    if tamper_source is None:
        tamper_source = body.get("tamper_flag")
    counter_source = body.get("counter")

    return SanitizedScan(
        raw_json=raw,
        plate=normalize_plate(_as_str(body.get("plate"), MAX_PLATE_LEN, "")),
        uuid=_as_str(body.get("uuid"), MAX_UUID_LEN),
        counter=_clamp_int(0 if counter_source is None else counter_source, 0, COUNTER_MAX, 0),
        sig_valid=bool(_as_bool(body.get("sig_valid"), True)) and has_identity,
        chal_valid=bool(_as_bool(body.get("chal_valid"), True)) and has_identity,
        tamper=bool(_as_bool(tamper_source, False)),
        pubkey_match=_as_bool(body.get("pubkey_match"), None),
        pubkey_hex=pubkey_hex,
        result=_as_str(body.get("result"), MAX_RESULT_LEN, "UNKNOWN"),
        rssi=None if body.get("rssi") is None else _clamp_int(body.get("rssi"), -120, 20, -60),
        est_distance_m=_clamp_float(body.get("est_distance_m"), 0, 5000),
        gps_lat=_clamp_float(body.get("gps_lat"), -90, 90),
        gps_lon=_clamp_float(body.get("gps_lon"), -180, 180),
        scanner_id=_as_str(body.get("scanner_id"), MAX_SCANNER_ID_LEN),
        officer_id=_as_str(body.get("officer_id"), MAX_OFFICER_ID_LEN),
        vin=_as_str(body.get("vin"), MAX_VIN_LEN),
        make=_as_str(body.get("make"), MAX_MAKE_LEN),
        model=_as_str(body.get("model"), MAX_MODEL_LEN),
        colour=_as_str(body.get("colour"), MAX_COLOUR_LEN),
    )


@dataclass
class ScanOutcome:
    scan: ScanEventRecord
    fusion_row: FusionEvent
    result: FusedResult
    identity: IdentityResolution
    anpr_row: Optional[AnprEvent] = None
    ai_row: Optional[AiEvent] = None
    deduplicated: bool = False

    def to_response(self) -> dict:
        vehicle = self.identity.vehicle
        return {
            "ok": True,
            "id": self.scan.id,
            "created_at": self.scan.created_at,
            "fusion_id": self.fusion_row.id,
            "fusion_verdict": self.result.fusion_verdict.value,
            "final_label": self.result.final_label.value,
            "visual_confidence": self.result.visual_confidence.value,
            "reasons": list(self.result.reasons),
            "cloud_verdict": self.identity.verdict.value,
            "cloud_action": self.identity.action.value,
            "cloud_reasons": list(self.identity.reasons),
            "cloud_vehicle": vehicle.summary() if vehicle else None,
            "anpr_id": self.anpr_row.id if self.anpr_row else None,
            "ai_id": self.ai_row.id if self.ai_row else None,
            "deduplicated": self.deduplicated,
        }


def _fusion_payload(
    result: FusedResult,
    identity: IdentityResolution,
    *,
    scan_id: int,
    anpr_row: Optional[AnprEvent],
    ai_row: Optional[AiEvent],
) -> dict:
    vehicle = identity.vehicle
    registry_vehicle = None
    if vehicle is not None:
        registry_vehicle = {**vehicle.summary(), "public_key": vehicle.public_key}
    payload = result.to_dict()
    payload["cloud"] = {
        "cloud_verdict": identity.verdict.value,
        "cloud_action": identity.action.value,
        "reasons": list(identity.reasons),
        "registry_vehicle": registry_vehicle,
    }
    payload["linked"] = {
        "scan_id": scan_id,
        "anpr_id": anpr_row.id if anpr_row else None,
        "ai_id": ai_row.id if ai_row else None,
    }
    return payload


def _lock_registry_plate(db: Session, plate: str) -> None:
    # Row lock on the registry vehicle serializes de-duplication per plate.
    db.query(Vehicle).filter(Vehicle.plate == plate).with_for_update().first()


def _recent_uuid_missing(db: Session, plate: Optional[str], since: datetime) -> Optional[FusionEvent]:
    if not plate:
        return None
    return (
        db.query(FusionEvent)
        .filter(
            FusionEvent.plate == plate,
            FusionEvent.fusion_verdict == FusionVerdict.UUID_MISSING.value,
            FusionEvent.created_at >= since,
        )
        .order_by(desc(FusionEvent.created_at), desc(FusionEvent.id))
        .first()
    )


def ingest_scan(
    db: Session,
    body: dict,
    *,
    window_sec: Optional[int] = None,
    dedup_sec: Optional[int] = None,
    max_raw_json_bytes: Optional[int] = None,
) -> ScanOutcome:
    window_sec = settings.fusion_window_sec if window_sec is None else window_sec
    dedup_sec = settings.uuid_missing_dedup_sec if dedup_sec is None else dedup_sec
    clean = sanitize_scan(body, max_raw_json_bytes=max_raw_json_bytes)

    try:
        anchor = utc_now()
        scan = ScanEventRecord(
            created_at=anchor,
            ver=1,
            flags=0,
            uuid=clean.uuid,
            counter=clean.counter,
            sig_valid=clean.sig_valid,
            chal_valid=clean.chal_valid,
            tamper_flag=clean.tamper,
            result=clean.result,
            plate=clean.plate or None,
            vin=clean.vin,
            make=clean.make,
            model=clean.model,
            colour=clean.colour,
            rssi=clean.rssi,
            est_distance_m=clean.est_distance_m,
            gps_lat=clean.gps_lat,
            gps_lon=clean.gps_lon,
            scanner_id=clean.scanner_id,
            officer_id=clean.officer_id,
            raw_json=clean.raw_json,
        )
        db.add(scan)
        db.flush()

        identity = resolve_identity(SqlRegistry(db), pubkey_hex=clean.pubkey_hex, plate=clean.plate)
        anpr_row = latest_anpr_near(db, clean.plate, anchor, window_sec)
        ai_row = latest_ai_near(db, clean.plate, anchor, window_sec)
        last_counter = previous_counter(db, clean.uuid, exclude_scan_id=scan.id)

        result = decide_fusion(
            registry_vehicle=identity.vehicle,
            scan_event=ScanEvent(
                plate=clean.plate or None,
                uuid=clean.uuid,
                counter=clean.counter,
                sig_valid=clean.sig_valid,
                chal_valid=clean.chal_valid,
                pubkey_match=clean.pubkey_match,
                tamper=clean.tamper,
                cloud_verdict=identity.verdict,
                has_identity=clean.has_identity,
                rssi=clean.rssi,
                est_distance_m=clean.est_distance_m,
            ),
            anpr_event=to_anpr_observation(anpr_row) if anpr_row else None,
            ai_event=to_ai_observation(ai_row) if ai_row else None,
            last_counter=last_counter,
        )

        existing = None
        if dedup_sec > 0 and result.fusion_verdict is FusionVerdict.UUID_MISSING:
            _lock_registry_plate(db, identity.vehicle.plate)
            existing = _recent_uuid_missing(db, result.plate, anchor - timedelta(seconds=dedup_sec))

        if existing is not None:
            fusion_row = existing
            logger.info(
                "UUID_MISSING de-duplicated scan_id=%s plate=%s fusion_id=%s",
                scan.id,
                result.plate,
                existing.id,
            )
        else:
            fusion_row = FusionEvent(
                created_at=anchor,
                plate=result.plate,
                scan_id=scan.id,
                anpr_id=anpr_row.id if anpr_row else None,
                ai_id=ai_row.id if ai_row else None,
                fusion_verdict=result.fusion_verdict.value,
                final_label=result.final_label.value,
                visual_confidence=result.visual_confidence.value,
                has_gotid=result.has_gotid,
                registry_status=result.registry_status,
                reasons=list(result.reasons),
                raw_json=_fusion_payload(result, identity, scan_id=scan.id, anpr_row=anpr_row, ai_row=ai_row),
            )
            db.add(fusion_row)
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Scan ingested scan_id=%s plate=%s cloud=%s verdict=%s label=%s visual=%s",
        scan.id,
        scan.plate,
        identity.verdict.value,
        result.fusion_verdict.value,
        result.final_label.value,
        result.visual_confidence.value,
    )
    return ScanOutcome(
        scan=scan,
        fusion_row=fusion_row,
        result=result,
        identity=identity,
        anpr_row=anpr_row,
        ai_row=ai_row,
        deduplicated=existing is not None,
    )
