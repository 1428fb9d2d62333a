"""
ANPR and AI camera intake endpoints.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...core.errors import error_response, log_exception
from ...schemas.observation import AiIn, AnprIn
from ...services.observations import ingest_ai, ingest_anpr
from ...services.errors import IngestRejected


anpr_router = APIRouter(prefix="/v1/anpr", tags=["anpr"])
ai_router = APIRouter(prefix="/v1/ai", tags=["ai"])

logger = logging.getLogger("observations")


@anpr_router.post("", status_code=201)
def create_anpr_event(payload: AnprIn, db: Session = Depends(get_db)):
    try:
        row = ingest_anpr(db, payload)
    except IngestRejected as exc:
        return error_response(exc.status_code, exc.error)
    except Exception as exc:
        db.rollback()
        log_exception(logger, "ANPR insert failed", extra={"plate": payload.plate}, exc=exc)
        return error_response(500, "server_error")
    return {"ok": True, "anpr_id": row.id, "ts": row.ts}


@ai_router.post("", status_code=201)
def create_ai_event(payload: AiIn, db: Session = Depends(get_db)):
    try:
        row = ingest_ai(db, payload)
    except IngestRejected as exc:
        return error_response(exc.status_code, exc.error)
    except Exception as exc:
        db.rollback()
        log_exception(logger, "AI insert failed", extra={"plate": payload.plate}, exc=exc)
        return error_response(500, "server_error")
    return {"ok": True, "ai_id": row.id, "ts": row.ts}
