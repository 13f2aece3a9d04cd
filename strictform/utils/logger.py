"""Logging helpers for strictform.

Modules obtain loggers through ``get_logger(__name__)``; applications call
``setup_logging()`` once to attach handlers to the package logger.
"""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

PACKAGE_LOGGER = "strictform"


class JSONFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def __init__(self, include_timestamp: bool = True):
        super().__init__()
        self.include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if self.include_timestamp:
            payload["timestamp"] = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def _console_formatter(include_timestamp: bool) -> logging.Formatter:
    fmt = "%(levelname)-8s %(name)s: %(message)s"
    if include_timestamp:
        fmt = "%(asctime)s " + fmt
    return logging.Formatter(fmt)


def get_logger(name: str) -> logging.Logger:
    """Return a logger for ``name``, namespaced under the package logger."""
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: str = "INFO",
    format_type: str = "console",
    include_timestamp: bool = True,
    log_dir: Optional[str] = None,
) -> logging.Logger:
    """Configure the package logger.

    Args:
        level: Logging level name (``DEBUG``, ``INFO``...).
        format_type: ``"console"`` for human-readable lines, ``"json"`` for
            one JSON object per line.
        include_timestamp: Prefix records with their creation time.
        log_dir: Optional directory; when set, records are also written to
            ``<log_dir>/strictform.log``.

    Returns:
        The configured package logger.
    """
    if format_type not in ("console", "json"):
        raise ValueError(f"format_type must be 'console' or 'json', got {format_type!r}")

    if format_type == "json":
        formatter: logging.Formatter = JSONFormatter(include_timestamp=include_timestamp)
    else:
        formatter = _console_formatter(include_timestamp)

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level.upper())

    # Replace handlers from a previous call
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)

    if log_dir is not None:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path / "strictform.log", encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger
