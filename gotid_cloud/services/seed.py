"""
Seed the vehicle registry for local and demo use.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session

from ..fusion.identity import normalize_hex, normalize_plate
from ..models.vehicle import Vehicle

logger = logging.getLogger("seed")


def _load_seed(path: Path) -> List[Dict[str, Any]]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, list):
        return data
    return []


def seed_vehicles(db: Session, seed_path: Path) -> int:
    """
    Seed registry vehicles if the table is empty.

    Returns number of vehicles inserted.
    """
    existing = db.query(func.count(Vehicle.id)).scalar() or 0
    if existing > 0:
        return 0
    if not seed_path.exists():
        logger.warning("Vehicle seed file not found path=%s", seed_path)
        return 0
    count = 0
    seen: set[str] = set()
    for item in _load_seed(seed_path):
        if not isinstance(item, dict):
            continue
        plate = normalize_plate(item.get("plate"))
        if not plate or plate in seen:
            continue
        seen.add(plate)
        has_gotid = item.get("has_gotid")
        vehicle = Vehicle(
            plate=plate,
            vin=item.get("vin"),
            make=item.get("make"),
            model=item.get("model"),
            colour=item.get("colour"),
            gotid_uuid=item.get("gotid_uuid"),
            public_key=normalize_hex(item.get("public_key")) or None,
            has_gotid=has_gotid if isinstance(has_gotid, bool) else None,
            status=item.get("status") or "ACTIVE",
            raw_json=item,
        )
        db.add(vehicle)
        count += 1
    db.commit()
    logger.info("Seeded vehicles count=%s path=%s", count, seed_path)
    return count
