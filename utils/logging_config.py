"""Loguru setup for the reading journal: console output plus a rolling journal log."""

from __future__ import annotations

import os
import sys
from datetime import datetime
from pathlib import Path

from loguru import logger

from utils.constants import LOG_FILE_PREFIX, LOG_LEVEL_ENV, LOG_RETENTION, LOG_ROTATION

CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{line} - {message}"


def resolve_log_level(level: str | None = None) -> str:
    """Explicit level first, then the environment override, then INFO."""
    chosen = level or os.getenv(LOG_LEVEL_ENV) or "INFO"
    return chosen.strip().upper()


def configure_logging(logs_dir: Path, level: str | None = None) -> Path | None:
    """
    Send journal logs to stderr and to a per-session file under ``logs_dir``.

    The file rotates at ``LOG_ROTATION`` and the newest ``LOG_RETENTION`` files
    are kept. If the directory cannot be written, logging continues on stderr
    only.

    Returns:
        The session log file, or None when file logging is unavailable
    """
    level = resolve_log_level(level)
    logger.remove()
    logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT, enqueue=True)

    log_file = logs_dir / f"{LOG_FILE_PREFIX}_{datetime.now():%Y%m%d_%H%M%S}.log"
    try:
        logs_dir.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level=level,
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
            encoding="utf-8",
            backtrace=True,
            diagnose=False,
            enqueue=True,
        )
    except OSError as exc:
        logger.warning(f"Journal log disabled; cannot write to {logs_dir}: {exc}")
        return None

    logger.debug(f"Journal log at {log_file} (level {level})")
    return log_file
