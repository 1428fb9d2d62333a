"""
Liveness endpoints. No database access, so they answer even when the
database is down.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter

from ...core.config import settings


router = APIRouter(tags=["health"])


@router.get("/healthz")
def healthz() -> dict:
    return {"ok": True, "service": settings.service_name, "ts": datetime.now(timezone.utc).isoformat()}


@router.get("/health")
def health() -> dict:
    return {"ok": True, "service": settings.service_name, "time": datetime.now(timezone.utc).isoformat()}
