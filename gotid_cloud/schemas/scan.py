"""
Pydantic schemas for scan and fusion rows returned by the REST API.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict


class ScanEventOut(BaseModel):
    id: int
    created_at: datetime
    ver: int
    flags: int
    uuid: Optional[str]
    counter: Optional[int]
    sig_valid: Optional[bool]
    chal_valid: Optional[bool]
    tamper_flag: Optional[bool]
    result: Optional[str]
    plate: Optional[str]
    vin: Optional[str]
    make: Optional[str]
    model: Optional[str]
    colour: Optional[str]
    rssi: Optional[int]
    est_distance_m: Optional[float]
    gps_lat: Optional[float]
    gps_lon: Optional[float]
    scanner_id: Optional[str]
    officer_id: Optional[str]

    model_config = ConfigDict(from_attributes=True, protected_namespaces=())


class LinkedIds(BaseModel):
    scan_id: Optional[int] = None
    anpr_id: Optional[int] = None
    ai_id: Optional[int] = None


class FusionEventOut(BaseModel):
    id: int
    created_at: datetime
    plate: Optional[str]
    scan_id: Optional[int]
    anpr_id: Optional[int]
    ai_id: Optional[int]
    fusion_verdict: str
    final_label: str
    visual_confidence: str
    has_gotid: Optional[bool]
    registry_status: Optional[str]
    reasons: Optional[List[str]]
    raw_json: Optional[Any]
    linked: Optional[LinkedIds] = None

    model_config = ConfigDict(from_attributes=True)
