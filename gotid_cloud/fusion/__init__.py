"""
Identity fusion and anti-clone verdict engine.

Pure decision logic only: no database, no HTTP. See ``engine.decide_fusion``.
"""

from .engine import decide_fusion
from .identity import IdentityResolution, RegistryLookup, pubkey_candidates, resolve_identity
from .types import (
    AiObservation,
    AnprObservation,
    CloudAction,
    CloudVerdict,
    FinalLabel,
    FusedResult,
    FusionVerdict,
    RegistryVehicle,
    ScanEvent,
    VisualConfidence,
)

__all__ = [
    "decide_fusion",
    "resolve_identity",
    "pubkey_candidates",
    "IdentityResolution",
    "RegistryLookup",
    "AiObservation",
    "AnprObservation",
    "CloudAction",
    "CloudVerdict",
    "FinalLabel",
    "FusedResult",
    "FusionVerdict",
    "RegistryVehicle",
    "ScanEvent",
    "VisualConfidence",
]
