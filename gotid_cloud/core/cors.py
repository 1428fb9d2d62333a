"""CORS setup driven by ``CORS_ALLOW_ORIGINS`` (comma separated)."""

from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware


def _split(raw: str) -> list[str]:
    return [part.strip() for part in raw.split(",") if part.strip()]


def enable_cors(app: FastAPI) -> bool:
    origins = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if not origins:
        return False
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_split(origins),
        allow_credentials=False,
        allow_methods=_split(os.getenv("CORS_ALLOW_METHODS", "GET,POST,OPTIONS")),
        allow_headers=_split(os.getenv("CORS_ALLOW_HEADERS", "Authorization,Content-Type")),
        max_age=int(os.getenv("CORS_MAX_AGE", "600")),
    )
    return True
