"""
Logging setup for gceops.

Modules log through ``logging.getLogger(__name__)``; nothing is emitted
until an application configures handlers, either itself or with
configure_logging(). Records about a tracked operation carry ``operation``
and ``scope`` attributes (passed via ``extra``), which both formatters
render.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Optional, TextIO

LOGGER_NAME: str = "gceops"

OPERATION_FIELDS: tuple[str, ...] = ("operation", "scope")

_PLAIN_FORMAT: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def _operation_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: getattr(record, key)
        for key in OPERATION_FIELDS
        if getattr(record, key, None) is not None
    }


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with operation context when present."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "message": record.getMessage(),
        }
        entry.update(_operation_fields(record))
        if record.exc_info and record.exc_info[1]:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


class OperationFormatter(logging.Formatter):
    """Human-readable format; appends ``[operation=... scope=...]`` when known."""

    def __init__(self) -> None:
        super().__init__(_PLAIN_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        fields = _operation_fields(record)
        if not fields:
            return text
        context = " ".join(f"{key}={value}" for key, value in fields.items())
        return f"{text} [{context}]"


def configure_logging(
    level: int | str = logging.INFO,
    json_format: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Attach a single stream handler to the ``gceops`` logger.

    Calling it again replaces the previous handler.
    """
    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    root.handlers.clear()

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter() if json_format else OperationFormatter())
    root.addHandler(handler)
    return root
