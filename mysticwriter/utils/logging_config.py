"""
Structured JSON logging for MysticWriter.

Each record becomes one JSON line carrying the message plus whichever
context fields the caller passed through ``extra``::

    from mysticwriter.utils.logging_config import get_logger

    logger = get_logger("mysticwriter.avatar")
    logger.info("avatar_uploaded", extra={"character": "Aria", "stage": "uploaded"})

Per-user request code wraps its logger in :class:`UserAdapter` so every line
carries ``user_id`` without repeating it.
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping

from mysticwriter.config import get_settings

ROOT_LOGGER = "mysticwriter"

# Context keys copied from ``extra`` into the JSON line when present
CONTEXT_FIELDS = ("user_id", "character", "stage", "duration_ms")


class JSONFormatter(logging.Formatter):
    """One JSON object per record: timestamp, level, logger, source, message, context."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "src": f"{record.module}:{record.lineno}",
            "message": record.getMessage(),
        }
        entry.update(
            (key, getattr(record, key))
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        )
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class UserAdapter(logging.LoggerAdapter):
    """Adds ``user_id`` to the ``extra`` of every call, keeping caller extras."""

    def __init__(self, logger: logging.Logger, user_id: str):
        super().__init__(logger, {"user_id": user_id})

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**kwargs.get("extra", {}), **self.extra}
        return msg, kwargs


def _handler(handler: logging.Handler, level: int | str = logging.NOTSET) -> logging.Handler:
    handler.setFormatter(JSONFormatter())
    handler.setLevel(level)
    return handler


_CONFIGURED = False


def setup_logging(log_file: str | None = None, level: int | str | None = None) -> None:
    """Attach JSON handlers to the ``mysticwriter`` logger once.

    Everything at ``level`` goes to ``log_file`` (skipped when empty);
    warnings and above also go to stderr.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    settings = get_settings()
    log_file = settings.log_file if log_file is None else log_file

    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level or settings.log_level)
    root.propagate = False

    if log_file:
        root.addHandler(_handler(logging.FileHandler(log_file, encoding="utf-8")))
    root.addHandler(_handler(logging.StreamHandler(sys.stderr), logging.WARNING))


def get_logger(name: str = ROOT_LOGGER) -> logging.Logger:
    """Child logger under ``mysticwriter``; configures logging on first use."""
    setup_logging()
    if name.startswith(ROOT_LOGGER):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")
