"""
Entry point for the GOT-ID Cloud backend.

This module creates the FastAPI application, includes all API routers,
and sets up error rendering, CORS and database bootstrap. Run with:

    uvicorn gotid_cloud.main:app --reload

"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path

from fastapi import FastAPI, Request

from .api import api_router
from .core.config import settings, get_app_env
from .core.cors import enable_cors
from .core.db import engine, SessionLocal
from .core.errors import install_error_envelope, log_exception
from .core.logging_config import setup_logging
from .core.request_limits import read_json_object
from .models import Base
from .scripts.run_migrations import run_migrations_to_head
from .services.seed import seed_vehicles

ENDPOINTS = {
    "health": "GET /healthz",
    "login": "POST /v1/auth/login",
    "scans": "POST /v1/scans",
    "recent_scans": "GET /v1/scans/recent",
    "anpr": "POST /v1/anpr",
    "ai": "POST /v1/ai",
    "recent_fusion": "GET /v1/fusion/recent?limit=10",
}


def create_app() -> FastAPI:
    setup_logging()
    app = FastAPI(title="GOT-ID Cloud", version="0.1.0")
    install_error_envelope(app)
    cors_enabled = enable_cors(app)
    app.include_router(api_router)

    @app.get("/")
    def index() -> dict:
        return {"ok": True, "service": settings.service_name, "endpoints": ENDPOINTS}

    @app.post("/api/test-scan")
    async def test_scan(request: Request) -> dict:
        body = await read_json_object(request)
        logging.getLogger("scan_ingest").info("Test scan received keys=%s", sorted(body))
        return {"ok": True, "received": body, "ts": datetime.now(timezone.utc).isoformat()}

    # Ensure tables exist for local use
    @app.on_event("startup")
    def _init_db() -> None:
        logger = logging.getLogger("startup")
        env = get_app_env()
        logger.info("Starting %s env=%s cors=%s", settings.service_name, env, cors_enabled)
        if settings.auto_create_db:
            try:
                Base.metadata.create_all(bind=engine)
            except Exception as exc:
                log_exception(logger, "DB create_all failed", exc=exc)
                if env == "prod":
                    raise
        if settings.auto_run_migrations:
            try:
                run_migrations_to_head()
            except Exception as exc:
                log_exception(logger, "DB migrations failed", exc=exc)
                if env == "prod":
                    raise
        if settings.seed_vehicles_path:
            path = Path(settings.seed_vehicles_path)
            try:
                with SessionLocal() as db:
                    seed_vehicles(db, path)
            except Exception as exc:
                log_exception(logger, "Seed vehicles failed", extra={"path": str(path)}, exc=exc)
                if env == "prod":
                    raise

    return app


app = create_app()
