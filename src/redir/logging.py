"""Structured logging helpers.

Every record is emitted as a single JSON line on stderr. Call sites attach
fields with ``logger.info("event", extra={"extra": {...}})``.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from .settings import get_settings

ROOT_LOGGER = "redir"


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extra = getattr(record, "extra", None)
        if isinstance(extra, dict):
            payload.update(extra)
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


def _configure_root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(JsonFormatter())
        root.addHandler(handler)
        root.setLevel(get_settings().log_level.upper())
        root.propagate = False
        # httpx logs every request at INFO; the tracer logs hops itself.
        logging.getLogger("httpx").setLevel(logging.WARNING)
    return root


def get_logger(name: str) -> logging.Logger:
    _configure_root()
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def set_level(level: int | str) -> None:
    if isinstance(level, str):
        level = level.upper()
    _configure_root().setLevel(level)
