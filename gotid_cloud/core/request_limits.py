"""Request size limits for JSON bodies."""

from __future__ import annotations

import os

from fastapi import HTTPException, Request


def _max_json_body_bytes() -> int:
    raw = os.getenv("MAX_JSON_BODY_BYTES", "1048576")
    try:
        val = int(raw)
    except Exception:
        val = 1048576
    return max(val, 1024)


def _content_length_too_large(request: Request, max_bytes: int) -> bool:
    length = request.headers.get("content-length")
    if not length:
        return False
    try:
        return int(length) > max_bytes
    except Exception:
        return False


async def enforce_json_body_limit(request: Request) -> None:
    max_bytes = _max_json_body_bytes()
    if _content_length_too_large(request, max_bytes):
        raise HTTPException(status_code=413, detail="payload_too_large")
    # Best-effort fallback when Content-Length is missing.
    if "content-length" not in {k.lower() for k in request.headers.keys()}:
        body = await request.body()
        if len(body) > max_bytes:
            raise HTTPException(status_code=413, detail="payload_too_large")


async def read_json_object(request: Request) -> dict:
    """Body as a dict; empty or non-object bodies yield ``{}``, malformed JSON is a 400."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        data = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="invalid_json")
    return data if isinstance(data, dict) else {}
