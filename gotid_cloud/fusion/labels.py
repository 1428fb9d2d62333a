"""Officer-facing label for a fusion verdict."""

from __future__ import annotations

from typing import Optional

from .types import FinalLabel, FusionVerdict, VisualConfidence

CORROBORATED = {VisualConfidence.STRONG, VisualConfidence.MEDIUM}

# verdict -> (label when visually corroborated, label otherwise)
_GRADED = {
    FusionVerdict.MATCH: (FinalLabel.MATCH_STRONG, FinalLabel.MATCH_WEAK_VISUAL),
    FusionVerdict.TAMPER: (FinalLabel.TAMPER_STRONG, FinalLabel.TAMPER_WEAK),
}

_FIXED = {
    FusionVerdict.MISMATCH: FinalLabel.CLONE_SUSPECT,
    FusionVerdict.MISMATCH_PUBKEY: FinalLabel.CLONE_SUSPECT,
    FusionVerdict.CRYPTO_FAIL: FinalLabel.CLONE_CRYPTO,
    FusionVerdict.COUNTER_ROLLBACK: FinalLabel.CLONE_CRYPTO,
}

_PASSTHROUGH = {label.value: label for label in FinalLabel}


def map_final_label(
    verdict: Optional[FusionVerdict],
    visual_confidence: VisualConfidence,
    has_gotid: bool,
) -> FinalLabel:
    if verdict is None:
        return FinalLabel.UNKNOWN
    corroborated = visual_confidence in CORROBORATED
    if verdict in _GRADED:
        strong, weak = _GRADED[verdict]
        return strong if corroborated else weak
    if verdict is FusionVerdict.UUID_MISSING and has_gotid:
        # A car the cameras clearly saw without its tag is the stronger case.
        return FinalLabel.CLONE_MISSING_TAG_STRONG if corroborated else FinalLabel.CLONE_MISSING_TAG_WEAK
    if verdict in _FIXED:
        return _FIXED[verdict]
    return _PASSTHROUGH.get(verdict.value, FinalLabel.UNKNOWN)
