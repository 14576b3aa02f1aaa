"""Structured Logging — JSON records for cache diagnostics, installed on the package logger.

Invariants:
    - Every entry carries timestamp, level, logger name, and message
    - Cache extras (scope, app_id, partition, operation, error_code, count) appear only when set
    - Nothing is configured on import; setup_logging runs when the host asks
      (directly or via build_app_cache(configure_logging=True))
    - Repeated setup replaces the previously installed handler, never stacks a second one

Design Decisions:
    - Handler lives on the "appcache" logger, not root: the host's own logging
      config is left alone
    - JSONFormatter over third-party libs: zero dependencies, full control
    - Log entries are diagnostic only; callers learn about failures from exceptions
"""

import json
import logging
from datetime import datetime, timezone

PACKAGE_LOGGER = "appcache"

_EXTRA_FIELDS = (
    "scope", "app_id", "partition", "operation", "error_code", "count",
)
_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s [%(operation)s] %(message)s"


class JSONFormatter(logging.Formatter):
    """One JSON object per record, cache extras included."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(
                record.created, timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update({
            key: record.__dict__[key]
            for key in _EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        })
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


class _TextFormatter(logging.Formatter):
    """Plain text with the operation tag; "-" when the record has none."""

    def __init__(self):
        super().__init__(_TEXT_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, "operation", None) is None:
            record = logging.makeLogRecord({**record.__dict__, "operation": "-"})
        return super().format(record)


class _CacheLogHandler(logging.StreamHandler):
    """Marker type so setup_logging can find what it installed before."""


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Install (or replace) the cache's log handler. Returns the new handler."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    for old in [h for h in logger.handlers if isinstance(h, _CacheLogHandler)]:
        logger.removeHandler(old)
        old.close()

    handler = _CacheLogHandler()
    handler.setFormatter(JSONFormatter() if fmt == "json" else _TextFormatter())
    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.propagate = False
    return handler
