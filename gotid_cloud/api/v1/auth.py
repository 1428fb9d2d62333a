"""
Token minting for scanners and officers.

There are no accounts: a caller declares an officer or scanner id and gets
a short-lived JWT carrying that id and the matching role.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter

from ...core.config import settings
from ...core.errors import error_response
from ...core.security import create_access_token
from ...schemas.auth import LoginIn


router = APIRouter(prefix="/v1/auth", tags=["auth"])

logger = logging.getLogger("auth")


@router.post("/login")
def login(payload: LoginIn):
    officer_id = (payload.officer_id or "").strip() or None
    scanner_id = (payload.scanner_id or "").strip() or None
    if not officer_id and not scanner_id:
        return error_response(400, "missing_identity", help="send officer_id or scanner_id")
    if not (settings.jwt_secret or "").strip():
        logger.error("JWT_SECRET missing in environment")
        return error_response(500, "server_misconfigured")
    role = "officer" if officer_id else "scanner"
    token = create_access_token(officer_id=officer_id, scanner_id=scanner_id, role=role)
    return {"ok": True, "token": token, "token_type": "bearer", "role": role}
