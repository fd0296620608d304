"""Logging configuration for vts-mcp.

stdout carries MCP frames only, so every handler writes to stderr or to
an optional log file.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

logger = logging.getLogger("vts_mcp")

_initialized = False

_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> None:
    """Attach handlers to the ``vts_mcp`` logger. Subsequent calls are no-ops."""
    global _initialized
    if _initialized:
        return
    _initialized = True

    log_level = logging.getLevelName(level.upper())
    if not isinstance(log_level, int):
        log_level = logging.INFO
    logger.setLevel(log_level)
    logger.propagate = False

    formatter = logging.Formatter(_FORMAT, datefmt="%H:%M:%S")

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    logger.addHandler(stderr_handler)

    if log_file:
        try:
            file_handler = logging.FileHandler(Path(log_file).expanduser(), mode="a", encoding="utf-8")
        except OSError as exc:
            logger.error("Failed to open log file %s: %s", log_file, exc)
        else:
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
