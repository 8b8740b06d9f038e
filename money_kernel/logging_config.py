"""
Structured JSON logging for the money tracker.

Every module logs through ``get_logger(__name__-ish suffix)`` so all
records land under the ``money_kernel`` hierarchy and are rendered as one
JSON object per line by StructuredFormatter.

Request-scoped fields (the command being run, its correlation id and the
record it targets) live in LogContext and are merged into every line
emitted while they are bound.  Monetary values, dates and ids passed via
``extra=`` are rendered as strings so amounts never lose precision.
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Mapping
from contextvars import ContextVar, Token
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

_LOGGER_PREFIX = "money_kernel"

# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar("money_log_context", default=_EMPTY)


class LogContext:
    """
    Command-scoped log fields, safe across threads and tasks.

    Only the names in ``FIELDS`` are carried; anything else passed to
    ``set`` or ``bind`` is ignored.  A ``None`` value leaves the field as
    it was.
    """

    FIELDS = ("correlation_id", "command", "record_id")

    @classmethod
    def _merged(cls, values: dict[str, str | None]) -> Mapping[str, str]:
        fields = dict(_context.get())
        for name, value in values.items():
            if name in cls.FIELDS and value is not None:
                fields[name] = value
        return MappingProxyType(fields)

    @classmethod
    def set(
        cls,
        *,
        correlation_id: str | None = None,
        command: str | None = None,
        record_id: str | None = None,
    ) -> None:
        _context.set(cls._merged({
            "correlation_id": correlation_id,
            "command": command,
            "record_id": record_id,
        }))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set(_EMPTY)

    @classmethod
    def bind(cls, **fields: str | None) -> "_BoundContext":
        """Context manager: apply ``fields`` on entry, restore the previous set on exit."""
        return _BoundContext(cls._merged, fields)


class _BoundContext:

    def __init__(self, merge, fields: dict[str, str | None]):
        self._merge = merge
        self._fields = fields
        self._token: Token | None = None

    def __enter__(self) -> type[LogContext]:
        self._token = _context.set(self._merge(self._fields))
        return LogContext

    def __exit__(self, *exc: Any) -> None:
        if self._token is not None:
            _context.reset(self._token)
            self._token = None


# ---------------------------------------------------------------------------
# JSON Formatter
# ---------------------------------------------------------------------------

_STDLIB_KEYS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "taskName"}


def _encode(obj: Any) -> Any:
    """Fallback encoder for values json cannot render natively."""
    if isinstance(obj, Enum):
        return obj.value
    if isinstance(obj, (datetime, date)):
        return obj.isoformat()
    if isinstance(obj, (Decimal, UUID)):
        return str(obj)
    return repr(obj)


class StructuredFormatter(logging.Formatter):
    """Formats each log record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            **LogContext.get_all(),
        }

        for key, val in vars(record).items():
            if key not in _STDLIB_KEYS and key not in payload:
                payload[key] = val

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=_encode)

    @staticmethod
    def _exception_fields(exc: BaseException) -> dict[str, Any]:
        # MoneyTrackerError subclasses expose a code plus their public attributes
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        for key, val in vars(exc).items():
            if not key.startswith("_") and key != "code":
                fields[f"exc_{key}"] = val
        return fields


# ---------------------------------------------------------------------------
# Logger factory
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """Get a logger under the money_kernel namespace."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


# ---------------------------------------------------------------------------
# Initialization
# ---------------------------------------------------------------------------

_configured = False
_lock = threading.Lock()


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelNamesMapping().get(str(level).upper())
    if resolved is None:
        raise ValueError(f"Unknown logging level: {level!r}")
    return resolved


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> bool:
    """
    Attach a JSON handler to the money_kernel logger hierarchy.

    ``level`` accepts either a numeric level or a level name such as the
    ``logging.level`` configuration value.  Only the first call has any
    effect; it returns True when it configured the hierarchy.
    """
    global _configured
    resolved = _resolve_level(level)
    with _lock:
        if _configured:
            return False
        _configured = True

    root_logger = logging.getLogger(_LOGGER_PREFIX)
    root_logger.setLevel(resolved)
    root_logger.propagate = False

    h = handler if handler is not None else logging.StreamHandler(stream or sys.stderr)
    h.setFormatter(StructuredFormatter())
    root_logger.addHandler(h)
    return True


def reset_logging() -> None:
    """Reset logging configuration. FOR TESTING ONLY."""
    global _configured
    with _lock:
        _configured = False
    logger = logging.getLogger(_LOGGER_PREFIX)
    logger.handlers.clear()
    logger.setLevel(logging.WARNING)
