# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Centralized configuration for environment variables."""

import logging
import os
from pathlib import Path

DATA_DIR_ENV = "SCOREBOOK_DATA_DIR"
LOG_LEVEL_ENV = "SCOREBOOK_LOG_LEVEL"
PORT_ENV = "PORT"

DEFAULT_DATA_DIR = Path(__file__).resolve().parent / "data" / "store"
DEFAULT_PORT = 5050


def get_data_dir() -> Path:
    """Return the directory the file-backed store writes to."""
    raw = os.environ.get(DATA_DIR_ENV, "")
    return Path(raw).expanduser() if raw.strip() else DEFAULT_DATA_DIR


def get_log_level() -> int:
    """Return the configured logging level, falling back to INFO for unknown names."""
    name = os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO


def get_port() -> int:
    raw = os.environ.get(PORT_ENV, "")
    try:
        return int(raw)
    except ValueError:
        return DEFAULT_PORT
