"""
Value types shared by the identity fusion engine.

Everything here is immutable input or a freshly built output. The engine
never holds references to ORM rows; the service layer converts rows into
these dataclasses before calling it.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class CloudVerdict(str, Enum):
    AUTHENTIC = "AUTHENTIC"
    MISMATCH = "MISMATCH"
    REVOKED_VEHICLE = "REVOKED_VEHICLE"
    UNREGISTERED_VEHICLE = "UNREGISTERED_VEHICLE"
    UNREGISTERED_IDENTITY = "UNREGISTERED_IDENTITY"
    INVALID_IDENTITY = "INVALID_IDENTITY"
    KEY_MISMATCH = "KEY_MISMATCH"
    UUID_MISSING = "UUID_MISSING"


class CloudAction(str, Enum):
    NONE = "NONE"
    INVESTIGATE = "INVESTIGATE"
    STOP = "STOP"
    STOP_INVESTIGATE = "STOP_INVESTIGATE"


class FusionVerdict(str, Enum):
    MATCH = "MATCH"
    MISMATCH = "MISMATCH"
    MISMATCH_PUBKEY = "MISMATCH_PUBKEY"
    NOT_ENROLLED = "NOT_ENROLLED"
    UNKNOWN_TAG = "UNKNOWN_TAG"
    UUID_MISSING = "UUID_MISSING"
    COUNTER_ROLLBACK = "COUNTER_ROLLBACK"
    CRYPTO_FAIL = "CRYPTO_FAIL"
    TAMPER = "TAMPER"


class FinalLabel(str, Enum):
    MATCH_STRONG = "MATCH_STRONG"
    MATCH_WEAK_VISUAL = "MATCH_WEAK_VISUAL"
    CLONE_MISSING_TAG_STRONG = "CLONE_MISSING_TAG_STRONG"
    CLONE_MISSING_TAG_WEAK = "CLONE_MISSING_TAG_WEAK"
    CLONE_SUSPECT = "CLONE_SUSPECT"
    CLONE_CRYPTO = "CLONE_CRYPTO"
    TAMPER_STRONG = "TAMPER_STRONG"
    TAMPER_WEAK = "TAMPER_WEAK"
    # Verdicts that pass through unchanged
    NOT_ENROLLED = "NOT_ENROLLED"
    UNKNOWN_TAG = "UNKNOWN_TAG"
    UUID_MISSING = "UUID_MISSING"
    UNKNOWN = "UNKNOWN"


class VisualConfidence(str, Enum):
    NONE = "NONE"
    WEAK = "WEAK"
    MEDIUM = "MEDIUM"
    STRONG = "STRONG"


@dataclass(frozen=True)
class RegistryVehicle:
    """Authoritative registry record for one enrolled plate."""

    plate: str
    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    colour: Optional[str] = None
    # None means the registry row never recorded enrollment either way.
    has_gotid: Optional[bool] = None
    public_key: Optional[str] = None
    status: Optional[str] = None
    meta: dict = field(default_factory=dict)

    def summary(self) -> dict:
        return {
            "plate": self.plate,
            "vin": self.vin,
            "make": self.make,
            "model": self.model,
            "colour": self.colour,
            "status": self.status,
        }


@dataclass(frozen=True)
class ScanEvent:
    """
    One cryptographic observation from a handheld scanner.

    ``sig_valid``, ``chal_valid`` and ``pubkey_match`` are three-valued:
    ``None`` means the scanner could not tell.
    """

    plate: Optional[str] = None
    uuid: Optional[str] = None
    counter: Optional[int] = None
    sig_valid: Optional[bool] = None
    chal_valid: Optional[bool] = None
    pubkey_match: Optional[bool] = None
    tamper: bool = False
    cloud_verdict: Optional[CloudVerdict] = None
    has_identity: Optional[bool] = None
    rssi: Optional[int] = None
    est_distance_m: Optional[float] = None

    def __post_init__(self) -> None:
        if self.counter is not None:
            if isinstance(self.counter, bool) or not isinstance(self.counter, int):
                raise TypeError(f"counter must be an int, got {type(self.counter).__name__}")
            if self.counter < 0:
                raise ValueError(f"counter must be non-negative, got {self.counter}")
        if self.cloud_verdict is not None and not isinstance(self.cloud_verdict, CloudVerdict):
            object.__setattr__(self, "cloud_verdict", CloudVerdict(self.cloud_verdict))

    def to_dict(self) -> dict:
        data = asdict(self)
        data["cloud_verdict"] = self.cloud_verdict.value if self.cloud_verdict else None
        return data


@dataclass(frozen=True)
class AnprObservation:
    plate: Optional[str] = None
    ts: Optional[datetime] = None
    confidence: Optional[float] = None
    camera_id: Optional[str] = None
    event_id: Optional[int] = None


@dataclass(frozen=True)
class AiObservation:
    plate: Optional[str] = None
    ts: Optional[datetime] = None
    confidence: Optional[float] = None
    make: Optional[str] = None
    model: Optional[str] = None
    colour: Optional[str] = None
    camera_id: Optional[str] = None
    event_id: Optional[int] = None


@dataclass
class FusedResult:
    fusion_verdict: FusionVerdict
    final_label: FinalLabel
    visual_confidence: VisualConfidence
    reasons: list[str]
    plate: Optional[str]
    has_gotid: bool
    registry_status: str
    crypto: dict[str, Any]
    anpr: Optional[AnprObservation] = None
    ai: Optional[AiObservation] = None
    scan: Optional[ScanEvent] = None

    def to_dict(self) -> dict:
        """JSON-ready view, used for the persisted fusion payload."""
        return {
            "fusion_verdict": self.fusion_verdict.value,
            "final_label": self.final_label.value,
            "visual_confidence": self.visual_confidence.value,
            "reasons": list(self.reasons),
            "plate": self.plate,
            "has_gotid": self.has_gotid,
            "registry_status": self.registry_status,
            "crypto": dict(self.crypto),
            "anpr": _observation_dict(self.anpr),
            "ai": _observation_dict(self.ai),
            "scan": self.scan.to_dict() if self.scan else None,
        }


def _observation_dict(obs: AnprObservation | AiObservation | None) -> Optional[dict]:
    if obs is None:
        return None
    data = asdict(obs)
    if isinstance(data.get("ts"), datetime):
        data["ts"] = data["ts"].isoformat()
    return data
