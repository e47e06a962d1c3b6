"""Structured JSON logging for imgpublish.

Each record is one JSON object per line on stderr::

    {"ts": "2026-10-19T12:00:00.123456+00:00", "level": "WARNING",
     "logger": "imgpublish.coordinator", "message": "Upload failed",
     "op": "upload", "resolved_path": "assets/pic.png",
     "error": "AccessDenied: Access Denied"}

Modules create their logger once at import time::

    log = get_logger("imgpublish.coordinator")
    log.warning("Upload failed", extra={"extra_fields": {"op": "upload"}})

Loggers default to WARNING so that only missing assets, failed uploads
and retries show up.  :func:`set_level` raises or lowers every
imgpublish logger at once (the CLI's ``--verbose`` flag).
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

ROOT_LOGGER = "imgpublish"


class StructuredFormatter(logging.Formatter):
    """Render a record as a single-line JSON object.

    ``ts`` is the time the record was created, in UTC.  Fields passed as
    ``extra={"extra_fields": {...}}`` are merged into the top level;
    values JSON cannot encode are stringified.
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        extra_fields: dict[str, Any] | None = getattr(record, "extra_fields", None)
        if extra_fields:
            entry.update(extra_fields)

        if record.exc_info and record.exc_info[1] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        if record.stack_info:
            entry["stack_info"] = self.formatStack(record.stack_info)

        return json.dumps(entry, default=str)


_configured: set[str] = set()


def _resolve_level(level: int | str) -> int:
    if isinstance(level, str):
        return logging.getLevelName(level.upper())
    return level


def get_logger(
    name: str = ROOT_LOGGER,
    *,
    level: int | str = logging.WARNING,
    stream: Any | None = None,
) -> logging.Logger:
    """Return the structured logger called *name*.

    The first call for a name attaches a :class:`StructuredFormatter`
    handler writing to *stream* (``sys.stderr`` by default) and sets
    *level*; later calls return the same logger untouched.
    """
    logger = logging.getLogger(name)
    if name in _configured:
        return logger

    logger.setLevel(_resolve_level(level))
    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())
    logger.addHandler(handler)
    logger.propagate = False
    _configured.add(name)
    return logger


def set_level(level: int | str, prefix: str = ROOT_LOGGER) -> list[str]:
    """Set *level* on every logger created by :func:`get_logger` under *prefix*.

    Returns the names of the loggers that were changed.
    """
    resolved = _resolve_level(level)
    changed: list[str] = []
    for name in sorted(_configured):
        if name == prefix or name.startswith(prefix + "."):
            logging.getLogger(name).setLevel(resolved)
            changed.append(name)
    return changed
