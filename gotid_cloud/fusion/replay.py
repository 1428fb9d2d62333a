"""Monotonic counter check for replayed or cloned identity tags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ReplayStatus(str, Enum):
    UNCHECKED = "UNCHECKED"
    ADVANCED = "ADVANCED"
    STALLED = "STALLED"
    ROLLBACK = "ROLLBACK"


ROLLBACK_REASON = "Counter rolled back compared to previous scan (possible replay/clone)."
STALL_REASON = "Counter did not advance since previous scan (possible replay)."


@dataclass(frozen=True)
class ReplayCheck:
    status: ReplayStatus
    counter: Optional[int] = None
    last_counter: Optional[int] = None

    @property
    def rollback(self) -> bool:
        return self.status is ReplayStatus.ROLLBACK

    @property
    def stalled(self) -> bool:
        return self.status is ReplayStatus.STALLED


def _as_counter(value, name: str) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int or None, got {type(value).__name__}")
    return value


def check_counter(counter: Optional[int], last_counter: Optional[int]) -> ReplayCheck:
    counter = _as_counter(counter, "counter")
    last_counter = _as_counter(last_counter, "last_counter")
    if counter is None or last_counter is None:
        return ReplayCheck(ReplayStatus.UNCHECKED, counter, last_counter)
    if counter < last_counter:
        return ReplayCheck(ReplayStatus.ROLLBACK, counter, last_counter)
    if counter == last_counter:
        return ReplayCheck(ReplayStatus.STALLED, counter, last_counter)
    return ReplayCheck(ReplayStatus.ADVANCED, counter, last_counter)
