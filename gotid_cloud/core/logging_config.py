"""
Logging configuration utilities.

A single helper configures Python's logging module with the format used
across the service. Module loggers are named after their concern
(``scan_ingest``, ``fusion``, ``startup``) rather than ``__name__``.
"""

import logging
import os
from typing import Optional


def _level_from_env(default: int) -> int:
    raw = (os.getenv("LOG_LEVEL") or "").strip().upper()
    if not raw:
        return default
    level = logging.getLevelName(raw)
    return level if isinstance(level, int) else default


def setup_logging(level: int = logging.INFO, log_file: Optional[str] = None) -> None:
    """Configure root logger with a basic formatter.

    Parameters
    ----------
    level: int
        Logging level (e.g. ``logging.INFO``). ``LOG_LEVEL`` overrides it.
    log_file: Optional[str]
        Optional file path to log to. If provided, logs are also written to
        the specified file.
    """
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(
        level=_level_from_env(level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        handlers=handlers,
    )
