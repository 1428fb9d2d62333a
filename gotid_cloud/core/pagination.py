"""Limit helpers with hard caps."""

from __future__ import annotations

import os
from typing import Optional

DEFAULT_LIMIT = 10
DEFAULT_MAX_LIMIT = 100


def get_max_limit() -> int:
    raw = os.getenv("API_MAX_PAGE_SIZE", str(DEFAULT_MAX_LIMIT))
    try:
        val = int(raw)
    except Exception:
        val = DEFAULT_MAX_LIMIT
    if val < 1:
        return DEFAULT_MAX_LIMIT
    return val


def clamp_limit(limit: Optional[str | int], default: int = DEFAULT_LIMIT) -> int:
    """Parse a user-supplied limit; junk or non-positive values fall back to ``default``."""
    try:
        val = int(str(limit).strip()) if limit is not None else default
    except ValueError:
        val = default
    if val <= 0:
        val = default
    return min(val, get_max_limit())
