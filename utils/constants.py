"""Constants file."""

import os
import sys
from pathlib import Path

APP_NAME = "Tea Leaf Fortune Reader"
STORAGE_KEY = "tea-leaf-readings"


def _default_base_dir() -> Path:
    """Return the writable base directory for config/logging."""
    if getattr(sys, "frozen", False):
        local_appdata = os.getenv("LOCALAPPDATA")
        if local_appdata:
            return Path(local_appdata) / APP_NAME
        return Path.home() / ".tea_leaf_reader"
    return Path(__file__).resolve().parent.parent


BASE_DATA_DIR = _default_base_dir()
CONFIG_DIR = BASE_DATA_DIR / "config"
LOGS_DIR = BASE_DATA_DIR / "logs"

LOG_FILE_PREFIX = "tea_leaf"
LOG_LEVEL_ENV = "TEA_LEAF_LOG_LEVEL"
LOG_ROTATION = "5 MB"
LOG_RETENTION = 5


def ensure_base_dirs() -> None:
    """Ensure base config/log directories exist without importing side effects."""
    BASE_DATA_DIR.mkdir(parents=True, exist_ok=True)
    for path in (CONFIG_DIR, LOGS_DIR):
        path.mkdir(parents=True, exist_ok=True)


SNAPSHOT_FILE = CONFIG_DIR / f"{STORAGE_KEY}.json"

__all__ = [
    "APP_NAME",
    "STORAGE_KEY",
    "BASE_DATA_DIR",
    "CONFIG_DIR",
    "LOGS_DIR",
    "LOG_FILE_PREFIX",
    "LOG_LEVEL_ENV",
    "LOG_RETENTION",
    "LOG_ROTATION",
    "SNAPSHOT_FILE",
    "ensure_base_dirs",
]
