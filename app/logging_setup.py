"""Logging configuration helpers for the FastAPI application."""
from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_LOG_DIR = Path(os.getenv("APP_LOG_DIR", "logs"))
DEFAULT_LOG_FILE = os.getenv("APP_LOG_FILENAME", "latest-run.log")
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s - %(message)s"
NOISY_LOGGERS = ("urllib3", "httpcore", "httpx", "openai")


def _normalise_level(level: Optional[str | int]) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        value = level.strip().upper()
        if value.isdigit():
            return int(value)
        mapping = logging.getLevelNamesMapping()
        if value in mapping:
            return mapping[value]
    return logging.INFO


def configure_logging(level: Optional[str | int] = None, log_dir: Optional[Path] = None) -> Path:
    """Configure root logging to stream to console and a fresh file.

    The log file is truncated on every call so each run starts clean. Client
    libraries that log every request are held at WARNING.
    """

    log_level = _normalise_level(level)
    directory = log_dir or DEFAULT_LOG_DIR
    directory.mkdir(parents=True, exist_ok=True)
    log_path = directory / DEFAULT_LOG_FILE

    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)

    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(log_path, mode="w", encoding="utf-8"),
        ],
    )
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
    logging.getLogger(__name__).info("Application logs initialised at %s", log_path)
    return log_path
