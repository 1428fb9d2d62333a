"""
Scan intake and the forensic scan log.

``POST /v1/scans`` runs the full pipeline in ``services.scan_ingest`` and
answers with the fusion verdict the officer acts on.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy import desc
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...core.errors import error_response, log_exception
from ...core.request_limits import read_json_object
from ...models.scan_event import ScanEventRecord
from ...schemas.scan import ScanEventOut
from ...services.errors import IngestRejected
from ...services.scan_ingest import ingest_scan


router = APIRouter(prefix="/v1/scans", tags=["scans"])

logger = logging.getLogger("scan_ingest")

RECENT_SCANS_LIMIT = 100


@router.post("")
async def create_scan(request: Request, db: Session = Depends(get_db)):
    body = await read_json_object(request)
    try:
        outcome = ingest_scan(db, body)
    except IngestRejected as exc:
        return error_response(exc.status_code, exc.error)
    except Exception as exc:
        log_exception(logger, "Scan insert / fusion failed", extra={"plate": body.get("plate")}, exc=exc)
        return error_response(500, "DB insert or fusion error")
    return outcome.to_response()


@router.get("/recent")
def recent_scans(db: Session = Depends(get_db)) -> dict:
    rows = (
        db.query(ScanEventRecord)
        .order_by(desc(ScanEventRecord.created_at), desc(ScanEventRecord.id))
        .limit(RECENT_SCANS_LIMIT)
        .all()
    )
    return {"ok": True, "scans": [ScanEventOut.model_validate(row).model_dump() for row in rows]}
