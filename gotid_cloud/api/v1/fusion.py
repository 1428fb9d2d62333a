from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import desc
from sqlalchemy.orm import Session

from ...core.db import get_db
from ...core.pagination import clamp_limit
from ...models.fusion_event import FusionEvent
from ...schemas.scan import FusionEventOut, LinkedIds


router = APIRouter(prefix="/v1/fusion", tags=["fusion"])


def _to_item(row: FusionEvent) -> dict:
    item = FusionEventOut.model_validate(row)
    # Linked ids come from the columns, not from the stored payload.
    item.linked = LinkedIds(scan_id=row.scan_id, anpr_id=row.anpr_id, ai_id=row.ai_id)
    return item.model_dump()


@router.get("/recent")
def recent_fusion(
    limit: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> dict:
    rows = db.query(FusionEvent).order_by(desc(FusionEvent.id)).limit(clamp_limit(limit)).all()
    items = [_to_item(row) for row in rows]
    return {"ok": True, "count": len(items), "rows": items}
