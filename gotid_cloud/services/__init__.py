"""
Service layer for the GOT-ID Cloud backend.

This package holds the database-facing side of fusion: registry lookups,
camera event correlation, scan ingestion and observation intake.
"""

from .errors import IngestRejected
from .scan_ingest import ingest_scan
from .observations import ingest_ai, ingest_anpr

__all__ = ["IngestRejected", "ingest_scan", "ingest_anpr", "ingest_ai"]
