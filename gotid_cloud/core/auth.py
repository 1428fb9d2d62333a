"""
Bearer-token auth for machine clients (scanners, ANPR, AI cameras) and
officers holding a token from ``/v1/auth/login``.
"""

from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional

from fastapi import Header, HTTPException

from .config import settings
from .security import decode_access_token

logger = logging.getLogger("auth")


@dataclass
class ClientContext:
    role: str
    auth: str
    officer_id: Optional[str] = None
    scanner_id: Optional[str] = None


def _extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    if not authorization.lower().startswith("bearer "):
        return None
    token = authorization.split(" ", 1)[1].strip()
    return token or None


def require_auth(authorization: Optional[str] = Header(None)) -> ClientContext:
    if settings.dev_allow_no_token:
        return ClientContext(role="scanner", auth="dev_bypass")

    expected = settings.api_token
    if not expected and not settings.jwt_secret:
        logger.error("API_TOKEN missing in environment")
        raise HTTPException(status_code=500, detail="server_misconfigured_no_api_token")

    token = _extract_bearer_token(authorization)
    if not token:
        raise HTTPException(status_code=401, detail="missing_token")

    if expected and secrets.compare_digest(token, expected):
        return ClientContext(role="scanner", auth="api_token")

    try:
        claims = decode_access_token(token)
    except ValueError:
        raise HTTPException(status_code=401, detail="invalid_token")
    return ClientContext(
        role=str(claims.get("role") or "scanner"),
        auth="jwt",
        officer_id=claims.get("officer_id"),
        scanner_id=claims.get("scanner_id"),
    )
