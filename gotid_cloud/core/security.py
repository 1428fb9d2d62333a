"""
JWT access tokens for officers and scanners (HS256).
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from .config import settings


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _b64url_decode(value: str) -> bytes:
    padding = "=" * (-len(value) % 4)
    return base64.urlsafe_b64decode(value + padding)


def _jwt_secret() -> str:
    return (settings.jwt_secret or "").strip()


def _sign(secret: str, signing_input: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def create_access_token(
    *,
    officer_id: Optional[str] = None,
    scanner_id: Optional[str] = None,
    role: str,
) -> str:
    secret = _jwt_secret()
    if not secret:
        raise RuntimeError("JWT_SECRET is required to mint tokens")
    now = datetime.now(timezone.utc)
    payload = {
        "officer_id": officer_id,
        "scanner_id": scanner_id,
        "role": role,
        "iss": settings.service_name,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(minutes=max(1, settings.jwt_exp_minutes))).timestamp()),
    }
    header = {"alg": "HS256", "typ": "JWT"}
    signing_input = (
        f"{_b64url_encode(json.dumps(header, separators=(',', ':')).encode('utf-8'))}."
        f"{_b64url_encode(json.dumps(payload, separators=(',', ':')).encode('utf-8'))}"
    )
    return f"{signing_input}.{_b64url_encode(_sign(secret, signing_input))}"


def decode_access_token(token: str) -> dict[str, Any]:
    secret = _jwt_secret()
    if not secret:
        raise ValueError("JWT secret not configured")
    parts = token.split(".")
    if len(parts) != 3:
        raise ValueError("Malformed token")
    header_b64, payload_b64, signature_b64 = parts
    expected_sig = _sign(secret, f"{header_b64}.{payload_b64}")
    provided_sig = _b64url_decode(signature_b64)
    if not secrets.compare_digest(expected_sig, provided_sig):
        raise ValueError("Invalid signature")
    payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    if not isinstance(payload, dict):
        raise ValueError("Invalid payload")
    exp = int(payload.get("exp") or 0)
    if exp <= 0:
        raise ValueError("Missing exp")
    now_ts = int(datetime.now(timezone.utc).timestamp())
    if now_ts >= exp:
        raise ValueError("Token expired")
    return payload
