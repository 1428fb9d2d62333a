"""
Cloud authority classification: match an observed public key and plate
against the vehicle registry.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Optional, Protocol

from .types import CloudAction, CloudVerdict, RegistryVehicle

# Uncompressed SEC1 elliptic-curve points start with this byte. Registries
# hold raw keys both with and without it.
UNCOMPRESSED_POINT_PREFIX = "04"

_HEX_RE = re.compile(r"^[0-9A-F]+$")

CLOUD_ACTIONS = {
    CloudVerdict.AUTHENTIC: CloudAction.NONE,
    CloudVerdict.MISMATCH: CloudAction.STOP,
    CloudVerdict.REVOKED_VEHICLE: CloudAction.STOP,
    CloudVerdict.KEY_MISMATCH: CloudAction.STOP,
    CloudVerdict.INVALID_IDENTITY: CloudAction.STOP_INVESTIGATE,
    CloudVerdict.UNREGISTERED_VEHICLE: CloudAction.INVESTIGATE,
    CloudVerdict.UNREGISTERED_IDENTITY: CloudAction.INVESTIGATE,
    CloudVerdict.UUID_MISSING: CloudAction.INVESTIGATE,
}


class RegistryLookup(Protocol):
    def find_by_plate(self, plate: str) -> Optional[RegistryVehicle]:
        ...

    def find_by_public_key(self, public_key: str) -> Optional[RegistryVehicle]:
        ...


@dataclass(frozen=True)
class IdentityResolution:
    verdict: CloudVerdict
    vehicle: Optional[RegistryVehicle]
    reasons: list[str] = field(default_factory=list)

    @property
    def action(self) -> CloudAction:
        return CLOUD_ACTIONS[self.verdict]


def normalize_plate(text: Optional[str]) -> str:
    return re.sub(r"\s+", "", (text or "").upper())


def normalize_hex(text: Optional[str]) -> str:
    return re.sub(r"\s+", "", (text or "").upper())


def normalize_status(text: Optional[str]) -> str:
    return (text or "").strip().upper()


def is_hex(text: str) -> bool:
    return bool(_HEX_RE.match(text))


def pubkey_candidates(pubkey_hex: Optional[str]) -> list[str]:
    """
    Ordered registry keys to try for an observed public key.

    The observed form comes first, followed by the same point with the
    uncompressed prefix toggled. Empty or non-hex input yields no candidates.
    """
    key = normalize_hex(pubkey_hex)
    if not key or not is_hex(key):
        return []
    if key.startswith(UNCOMPRESSED_POINT_PREFIX):
        bare = key[len(UNCOMPRESSED_POINT_PREFIX):]
        return [key, bare] if bare else [key]
    return [key, UNCOMPRESSED_POINT_PREFIX + key]


def resolve_identity(
    registry: RegistryLookup,
    *,
    pubkey_hex: Optional[str],
    plate: Optional[str],
) -> IdentityResolution:
    observed_plate = normalize_plate(plate)
    observed_key = normalize_hex(pubkey_hex)

    if not observed_key:
        reasons = ["No pubkey_hex provided by scanner (tag missing / not captured)."]
        if not observed_plate:
            return IdentityResolution(CloudVerdict.UUID_MISSING, None, reasons)
        vehicle = registry.find_by_plate(observed_plate)
        if vehicle is not None:
            reasons.append("Plate is enrolled but no GOT-ID identity was captured within scan window.")
            return IdentityResolution(CloudVerdict.UUID_MISSING, vehicle, reasons)
        reasons.append("Plate not found in registry (not enrolled / unknown vehicle).")
        return IdentityResolution(CloudVerdict.UNREGISTERED_VEHICLE, None, reasons)

    candidates = pubkey_candidates(observed_key)
    if not candidates:
        return IdentityResolution(
            CloudVerdict.INVALID_IDENTITY,
            None,
            ["pubkey_hex invalid (no usable candidates)."],
        )

    vehicle = None
    for key in candidates:
        vehicle = registry.find_by_public_key(key)
        if vehicle is not None:
            break

    if vehicle is None:
        by_plate = registry.find_by_plate(observed_plate) if observed_plate else None
        if by_plate is not None:
            return IdentityResolution(
                CloudVerdict.KEY_MISMATCH,
                by_plate,
                [f"Plate {observed_plate} is enrolled, but pubkey_hex is not enrolled/matching. Possible clone."],
            )
        return IdentityResolution(
            CloudVerdict.UNREGISTERED_IDENTITY,
            None,
            ["Identity not enrolled in cloud registry."],
        )

    status = normalize_status(vehicle.status)
    # A blank status is treated as ACTIVE.
    if status and status != "ACTIVE":
        return IdentityResolution(CloudVerdict.REVOKED_VEHICLE, vehicle, [f"Registry status={status}"])

    assigned_plate = normalize_plate(vehicle.plate)
    if observed_plate and assigned_plate and observed_plate != assigned_plate:
        return IdentityResolution(
            CloudVerdict.MISMATCH,
            vehicle,
            [f"Plate mismatch observed={observed_plate} assigned={assigned_plate}"],
        )
    return IdentityResolution(
        CloudVerdict.AUTHENTIC,
        vehicle,
        ["Identity enrolled + ACTIVE; plate consistent."],
    )
