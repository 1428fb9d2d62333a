"""
Pydantic schemas for camera observations.

``AnprIn`` and ``AiIn`` describe the bodies posted by ANPR and AI
cameras. Unknown keys are kept so the whole body can be stored as the
raw payload when the camera sends no ``raw`` object.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class AnprIn(BaseModel):
    model_config = ConfigDict(extra="allow")

    plate: Any = None
    # Seconds since epoch; server time when absent or not a number
    timestamp: Any = None
    camera_id: Optional[str] = None
    confidence: Optional[float] = None
    raw: Optional[Dict[str, Any]] = None


class AiIn(BaseModel):
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    plate: Any = None
    timestamp: Any = None
    camera_id: Optional[str] = None
    vehicle_conf: Optional[float] = None
    make: Optional[str] = None
    model: Optional[str] = None
    colour: Optional[str] = None
    raw: Optional[Dict[str, Any]] = None
