"""
GOT-ID fusion engine.

Crypto is the truth and cameras support it. ``decide_fusion`` is a pure
function: callers resolve the registry record, the correlated camera
events and the previous counter beforehand and pass them in as values.
"""

from __future__ import annotations

import logging
from typing import Optional

from .classifier import FusionContext, classify, identity_captured, resolve_enrollment
from .labels import map_final_label
from .replay import check_counter
from .types import AiObservation, AnprObservation, FusedResult, RegistryVehicle, ScanEvent
from .visual import assess_visual

logger = logging.getLogger("fusion")


def _check_type(value, expected: type, name: str) -> None:
    if value is not None and not isinstance(value, expected):
        raise TypeError(f"{name} must be {expected.__name__} or None, got {type(value).__name__}")


def decide_fusion(
    *,
    registry_vehicle: Optional[RegistryVehicle] = None,
    scan_event: Optional[ScanEvent] = None,
    anpr_event: Optional[AnprObservation] = None,
    ai_event: Optional[AiObservation] = None,
    last_counter: Optional[int] = None,
) -> FusedResult:
    _check_type(registry_vehicle, RegistryVehicle, "registry_vehicle")
    _check_type(scan_event, ScanEvent, "scan_event")
    _check_type(anpr_event, AnprObservation, "anpr_event")
    _check_type(ai_event, AiObservation, "ai_event")

    has_gotid = resolve_enrollment(registry_vehicle)
    replay = check_counter(scan_event.counter if scan_event else None, last_counter)
    ctx = FusionContext(
        registry_vehicle=registry_vehicle,
        scan=scan_event,
        has_gotid=has_gotid,
        identity_captured=identity_captured(scan_event),
        replay=replay,
    )
    classification = classify(ctx)
    visual = assess_visual(anpr_event, ai_event, registry_vehicle)
    label = map_final_label(classification.verdict, visual.grade, has_gotid)

    plate = (
        (anpr_event.plate if anpr_event else None)
        or (scan_event.plate if scan_event else None)
        or (registry_vehicle.plate if registry_vehicle else None)
        or None
    )
    crypto = {
        "sig_valid": scan_event.sig_valid if scan_event else None,
        "chal_valid": scan_event.chal_valid if scan_event else None,
        "pubkey_match": scan_event.pubkey_match if scan_event else None,
        "tamper": scan_event.tamper if scan_event else None,
        "counter": scan_event.counter if scan_event else None,
        "last_counter": last_counter,
        "cloud_verdict": scan_event.cloud_verdict.value if scan_event and scan_event.cloud_verdict else None,
        "has_identity": scan_event.has_identity if scan_event else None,
        "replay": replay.status.value,
    }

    logger.debug(
        "fusion rule=%s verdict=%s visual=%s score=%s label=%s",
        classification.rule,
        classification.verdict.value,
        visual.grade.value,
        visual.score,
        label.value,
    )

    return FusedResult(
        fusion_verdict=classification.verdict,
        final_label=label,
        visual_confidence=visual.grade,
        reasons=classification.reasons + visual.reasons,
        plate=plate,
        has_gotid=has_gotid,
        registry_status=(registry_vehicle.status if registry_vehicle else None) or "unknown",
        crypto=crypto,
        anpr=anpr_event,
        ai=ai_event,
        scan=scan_event,
    )
