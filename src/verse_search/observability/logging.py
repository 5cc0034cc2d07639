"""Log output for the ``verse-search`` command.

Search results own stdout, so every log line goes to stderr: either one JSON
object per record (the default) or a plain text line for interactive use.
"""

from __future__ import annotations

from datetime import datetime, timezone
import logging
from pathlib import PurePath
import sys
from typing import Any

import orjson

from verse_search.observability.context import get_trace_context


PLAIN_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# Chatty per-request loggers of the HTTP stack
_QUIET_LOGGERS = ("httpx", "httpcore")

_CONTEXT_FIELDS = ("doc_set", "collection")
_RECORD_ATTRS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


def _clip(text: str, limit: int) -> str:
    return text if len(text) <= limit else f"{text[:limit]}..."


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line.

    Besides the usual level, logger and message, each line carries the trace
    and span ids plus the doc set bound by the running search. Fields passed
    through ``extra=`` are copied as-is, except that secret-looking keys are
    masked and long strings are clipped.
    """

    REDACT_KEYS = frozenset({"password", "token", "api_key", "secret", "authorization"})
    MAX_MESSAGE_LEN = 2000
    MAX_FIELD_LEN = 500

    def format(self, record: logging.LogRecord) -> str:
        entry = self._base_fields(record)
        entry.update(self._extra_fields(record))
        return orjson.dumps(entry, default=self._json_default).decode("utf-8")

    def _base_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        ctx = get_trace_context()
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": _clip(record.getMessage(), self.MAX_MESSAGE_LEN),
            "trace_id": ctx.get("trace_id", ""),
            "span_id": ctx.get("span_id", ""),
        }
        package, _, component = record.name.rpartition(".")
        if package:
            entry["component"] = component
        entry.update({name: ctx[name] for name in _CONTEXT_FIELDS if ctx.get(name)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return entry

    def _extra_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        return {
            key: self._redact(key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS and not key.startswith("_")
        }

    def _redact(self, key: str, value: Any) -> Any:
        if key.lower() in self.REDACT_KEYS:
            return "[REDACTED]"
        if isinstance(value, str):
            return _clip(value, self.MAX_FIELD_LEN)
        return value

    @staticmethod
    def _json_default(value: Any) -> Any:
        if isinstance(value, (set, frozenset)):
            items = list(value)
            try:
                return sorted(items)
            except TypeError:
                return items
        if isinstance(value, (bytes, bytearray)):
            return bytes(value).decode("utf-8", errors="replace")
        if isinstance(value, (PurePath, BaseException)):
            return str(value)
        return repr(value)


def _level(name: str) -> int:
    return logging.getLevelNamesMapping().get(name.upper(), logging.INFO)


def configure_logging(
    level: str = "INFO",
    json_output: bool = True,
    *,
    logger_levels: dict[str, str] | None = None,
) -> None:
    """Send all logging to stderr through a single handler.

    Args:
        level: Root level name, case-insensitive; unknown names mean INFO
        json_output: Use :class:`JsonFormatter` instead of :data:`PLAIN_FORMAT`
        logger_levels: Level overrides by logger name, applied after the
            HTTP client loggers are turned down to WARNING
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if json_output else logging.Formatter(PLAIN_FORMAT))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(_level(level))

    overrides = dict.fromkeys(_QUIET_LOGGERS, "WARNING")
    overrides.update(logger_levels or {})
    for name, logger_level in overrides.items():
        logging.getLogger(name).setLevel(_level(logger_level))
