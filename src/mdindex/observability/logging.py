"""Log setup for mdindex: one stdout handler, JSON or plain text.

JSON records carry the ids of the active span, so the lines written during a
sync run or a query can be joined with its trace.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import Path
import sys
from typing import Any

import orjson

from mdindex.observability.tracing import current_trace_ids


PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Attributes every LogRecord has; anything else arrived through ``extra=``
_STANDARD_ATTRS = frozenset(logging.makeLogRecord({}).__dict__) | {"message", "asctime"}


def _encode_fallback(value: Any) -> Any:
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=str)
    if isinstance(value, Path):
        return str(value)
    return repr(value)


class JsonFormatter(logging.Formatter):
    """Render records as single-line JSON objects.

    Document text can end up in messages and extras (paths, query strings),
    so both are clipped. Extras named like credentials are masked.
    """

    MAX_MESSAGE_LEN = 2000
    MAX_EXTRA_LEN = 500
    MASKED_EXTRAS = frozenset({"password", "token", "secret", "authorization"})

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "component": record.name.rpartition(".")[2],
            "message": self._clip(record.getMessage(), self.MAX_MESSAGE_LEN),
        }
        ids = current_trace_ids()
        entry["trace_id"] = ids.get("trace_id", "")
        entry["span_id"] = ids.get("span_id", "")

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(self._extras(record))
        return orjson.dumps(entry, default=_encode_fallback).decode("utf-8")

    def _extras(self, record: logging.LogRecord) -> dict[str, Any]:
        extras: dict[str, Any] = {}
        for key, value in vars(record).items():
            if key in _STANDARD_ATTRS or key.startswith("_"):
                continue
            if key.lower() in self.MASKED_EXTRAS:
                value = "[REDACTED]"
            elif isinstance(value, str):
                value = self._clip(value, self.MAX_EXTRA_LEN)
            extras[key] = value
        return extras

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        return text if len(text) <= limit else text[:limit] + "..."


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Replace the root handlers with a single stdout handler.

    Args:
        level: Root log level name; unknown names fall back to INFO
        json_output: Use :class:`JsonFormatter` when True, plain text otherwise
        logger_levels: Per-logger level overrides (logger name -> level name)
    """
    root = logging.getLogger()
    root.setLevel(_level(level))
    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))
    root.addHandler(handler)

    # Worker-thread plumbing is noisy at DEBUG
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    for name, name_level in (logger_levels or {}).items():
        logging.getLogger(name).setLevel(_level(name_level))


def _level(name: str) -> int:
    value = logging.getLevelName(name.upper())
    return value if isinstance(value, int) else logging.INFO
