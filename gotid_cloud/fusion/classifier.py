"""
Fusion classifier: the ordered guard chain that turns registry, replay and
crypto signals into one ``FusionVerdict``.

Rules are evaluated top to bottom. A rule whose predicate holds contributes
its reason; if it also carries a verdict, evaluation stops there. Rules
without a verdict only annotate (the stalled-counter note). The last rule
always holds, so every context ends in exactly one verdict.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Optional

from .replay import ROLLBACK_REASON, STALL_REASON, ReplayCheck, ReplayStatus
from .types import CloudVerdict, FusionVerdict, RegistryVehicle, ScanEvent

# Registry rows that never recorded enrollment are treated as enrolled.
# Flip to False to require an explicit has_gotid=True.
ENROLLMENT_ASSUMED_WHEN_UNSET = True


def resolve_enrollment(
    vehicle: Optional[RegistryVehicle],
    *,
    assume_enrolled: bool = ENROLLMENT_ASSUMED_WHEN_UNSET,
) -> bool:
    if vehicle is None:
        return False
    if vehicle.has_gotid is None:
        return assume_enrolled
    return bool(vehicle.has_gotid)


def identity_captured(scan: Optional[ScanEvent]) -> bool:
    """True only when this scan carries positive evidence of a tag identity."""
    if scan is None:
        return False
    if scan.has_identity is True:
        return True
    if scan.uuid and str(scan.uuid).strip():
        return True
    if scan.pubkey_match is True:
        return True
    return scan.cloud_verdict in (CloudVerdict.AUTHENTIC, CloudVerdict.KEY_MISMATCH)


@dataclass(frozen=True)
class FusionContext:
    registry_vehicle: Optional[RegistryVehicle]
    scan: Optional[ScanEvent]
    has_gotid: bool
    identity_captured: bool
    replay: ReplayCheck = field(default_factory=lambda: ReplayCheck(ReplayStatus.UNCHECKED))

    @property
    def cloud_verdict(self) -> Optional[CloudVerdict]:
        return self.scan.cloud_verdict if self.scan else None

    @property
    def enrolled(self) -> bool:
        return self.registry_vehicle is not None and self.has_gotid


@dataclass(frozen=True)
class Rule:
    name: str
    applies: Callable[[FusionContext], bool]
    verdict: Optional[FusionVerdict]
    reason: str


@dataclass
class Classification:
    verdict: FusionVerdict
    rule: str
    reasons: list[str]


def _scan_flag(ctx: FusionContext, name: str, value: bool) -> bool:
    return ctx.scan is not None and getattr(ctx.scan, name) is value


RULES: tuple[Rule, ...] = (
    Rule(
        "cloud_key_mismatch",
        lambda ctx: ctx.cloud_verdict is CloudVerdict.KEY_MISMATCH,
        FusionVerdict.MISMATCH,
        "Plate is enrolled but presented pubkey is not enrolled/matching (clone suspected).",
    ),
    Rule(
        "not_in_registry",
        lambda ctx: ctx.registry_vehicle is None,
        FusionVerdict.NOT_ENROLLED,
        "Vehicle not found in registry for this scan context.",
    ),
    Rule(
        "not_enrolled_no_scan",
        lambda ctx: ctx.registry_vehicle is not None and not ctx.has_gotid and ctx.scan is None,
        FusionVerdict.NOT_ENROLLED,
        "Vehicle does not have GOT-ID assigned.",
    ),
    Rule(
        "tag_on_unenrolled_vehicle",
        lambda ctx: ctx.registry_vehicle is not None and not ctx.has_gotid and ctx.scan is not None,
        FusionVerdict.UNKNOWN_TAG,
        "GOT-ID tag detected but vehicle is not enrolled for GOT-ID.",
    ),
    Rule(
        "identity_not_captured",
        lambda ctx: ctx.enrolled and not ctx.identity_captured,
        FusionVerdict.UUID_MISSING,
        "Enrolled vehicle but no GOT-ID identity was captured within scan window.",
    ),
    Rule(
        "counter_rollback",
        lambda ctx: ctx.replay.rollback,
        FusionVerdict.COUNTER_ROLLBACK,
        ROLLBACK_REASON,
    ),
    Rule(
        "counter_stalled",
        lambda ctx: ctx.replay.stalled,
        None,
        STALL_REASON,
    ),
    Rule(
        "crypto_failed",
        lambda ctx: _scan_flag(ctx, "sig_valid", False) or _scan_flag(ctx, "chal_valid", False),
        FusionVerdict.CRYPTO_FAIL,
        "Signature or challenge-response failed.",
    ),
    Rule(
        "pubkey_mismatch",
        lambda ctx: _scan_flag(ctx, "pubkey_match", False),
        FusionVerdict.MISMATCH_PUBKEY,
        "GOT-ID tag pubkey does not match registry.",
    ),
    Rule(
        "tamper_active",
        lambda ctx: _scan_flag(ctx, "tamper", True),
        FusionVerdict.TAMPER,
        "GOT-ID tag tamper input is active.",
    ),
    Rule(
        "all_checks_passed",
        lambda ctx: True,
        FusionVerdict.MATCH,
        "All cryptographic checks passed and pubkey matches registry.",
    ),
)


def classify(ctx: FusionContext, rules: tuple[Rule, ...] = RULES) -> Classification:
    reasons: list[str] = []
    for rule in rules:
        if not rule.applies(ctx):
            continue
        reasons.append(rule.reason)
        if rule.verdict is not None:
            return Classification(verdict=rule.verdict, rule=rule.name, reasons=reasons)
    raise ValueError("Rule table has no terminal rule")
