"""
Visual corroboration score for ANPR and AI camera observations.

Cameras support the cryptographic verdict but never change it: this module
only produces a grade and, at most, an appearance-mismatch reason.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

from .types import AiObservation, AnprObservation, RegistryVehicle, VisualConfidence

# (minimum confidence, points), checked in order
CONFIDENCE_BANDS = ((0.9, 2), (0.7, 1))
UNKNOWN_CONFIDENCE_POINTS = 1
APPEARANCE_MATCH_POINTS = 1

# (minimum score, grade), checked in order
GRADE_THRESHOLDS = (
    (4, VisualConfidence.STRONG),
    (2, VisualConfidence.MEDIUM),
    (1, VisualConfidence.WEAK),
)

APPEARANCE_MISMATCH_REASON = "AI appearance does not fully match registry (make/colour)."


@dataclass
class VisualAssessment:
    score: int
    grade: VisualConfidence
    reasons: list[str] = field(default_factory=list)


def as_confidence(value) -> Optional[float]:
    """Finite numeric confidence, or None when unknown."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    value = float(value)
    if not math.isfinite(value):
        return None
    return value


def confidence_points(value) -> int:
    conf = as_confidence(value)
    if conf is None:
        return UNKNOWN_CONFIDENCE_POINTS
    for minimum, points in CONFIDENCE_BANDS:
        if conf >= minimum:
            return points
    return 0


def _norm(text: Optional[str]) -> str:
    return (text or "").strip().upper()


def _appearance(ai: AiObservation, vehicle: RegistryVehicle) -> tuple[bool, bool]:
    """Return (any attribute agrees, any attribute disagrees)."""
    agrees = False
    disagrees = False
    for observed, registered in ((ai.make, vehicle.make), (ai.colour, vehicle.colour)):
        a, r = _norm(observed), _norm(registered)
        if not a or not r:
            continue
        if a == r:
            agrees = True
        else:
            disagrees = True
    return agrees, disagrees


def grade_for(score: int) -> VisualConfidence:
    for minimum, grade in GRADE_THRESHOLDS:
        if score >= minimum:
            return grade
    return VisualConfidence.NONE


def assess_visual(
    anpr: Optional[AnprObservation],
    ai: Optional[AiObservation],
    vehicle: Optional[RegistryVehicle],
) -> VisualAssessment:
    score = 0
    reasons: list[str] = []
    if anpr is not None:
        score += confidence_points(anpr.confidence)
    if ai is not None:
        score += confidence_points(ai.confidence)
        if vehicle is not None:
            agrees, disagrees = _appearance(ai, vehicle)
            if agrees:
                score += APPEARANCE_MATCH_POINTS
            elif disagrees:
                reasons.append(APPEARANCE_MISMATCH_REASON)
    return VisualAssessment(score=score, grade=grade_for(score), reasons=reasons)
