"""
Structured JSON logging for the station ledger.

Every logger returned by ``get_logger`` lives under the ``station_kernel``
namespace and, once ``configure_logging`` has run, writes one JSON object
per line.  Fields bound with ``LogContext`` (station, actor, period, record)
are merged into every line emitted while they are bound, so service code
only passes event-specific data through ``extra``.

Line shape::

    {"ts": "...", "level": "INFO", "logger": "station_kernel.modules.stock.service",
     "message": "stock_period_initialized", "station_id": "S1", ...}
"""

__all__ = [
    "StructuredFormatter",
    "LogContext",
    "get_logger",
    "configure_logging",
    "set_log_level",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

_ROOT_LOGGER = "station_kernel"

_CONTEXT_FIELDS = (
    "correlation_id",
    "station_id",
    "actor_id",
    "period_key",
    "record_id",
)

_context: ContextVar[dict[str, str]] = ContextVar("station_log_context", default={})


class LogContext:
    """
    Request-scoped log fields, safe across threads and asyncio tasks.

    Only the names in ``_CONTEXT_FIELDS`` are accepted; anything else passed
    to ``set`` or ``bind`` is ignored.  Values are stored as strings.
    """

    @staticmethod
    def _merged(fields: dict[str, Any]) -> dict[str, str]:
        current = dict(_context.get())
        for name, value in fields.items():
            if name in _CONTEXT_FIELDS and value is not None:
                current[name] = str(value)
        return current

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set fields for the rest of the current context. None values are skipped."""
        _context.set(cls._merged(fields))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        return dict(_context.get())

    @classmethod
    def clear(cls) -> None:
        _context.set({})

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Set fields for the duration of a ``with`` block, then restore."""
        token = _context.set(cls._merged(fields))
        try:
            yield cls
        finally:
            _context.reset(token)


_RECORD_ATTRIBUTES: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    # StationKernelError subclasses keep their context as public attributes
    for name, value in vars(exc).items():
        if not name.startswith("_") and name != "code":
            fields[f"exc_{name}"] = value
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: envelope, bound context, extras, exception."""

    def format(self, record: logging.LogRecord) -> str:
        line: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        line.update(LogContext.get_all())
        line.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRIBUTES and key not in line
        )
        if record.exc_info and record.exc_info[1] is not None:
            line.update(_exception_fields(record.exc_info[1]))
            line["traceback"] = self.formatException(record.exc_info)
        return json.dumps(line, default=_json_default)


def get_logger(name: str) -> logging.Logger:
    """Logger named ``station_kernel.<name>``."""
    return logging.getLogger(f"{_ROOT_LOGGER}.{name}")


_setup_lock = threading.Lock()
_handler: logging.Handler | None = None


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``station_kernel`` logger.

    Only the first call has any effect until ``reset_logging`` runs, so
    library code may call this defensively without stacking handlers.
    ``handler`` wins over ``stream``; the default is stderr.
    """
    global _handler
    with _setup_lock:
        if _handler is not None:
            return
        _handler = handler or logging.StreamHandler(stream or sys.stderr)
        _handler.setFormatter(StructuredFormatter())

        root = logging.getLogger(_ROOT_LOGGER)
        root.setLevel(level)
        root.propagate = False
        root.addHandler(_handler)


def set_log_level(level: int | str) -> None:
    """Change the level after startup, e.g. once configuration has been read."""
    logging.getLogger(_ROOT_LOGGER).setLevel(level)


def reset_logging() -> None:
    """Detach the handler and restore the WARNING level. Used by tests."""
    global _handler
    with _setup_lock:
        _handler = None
        root = logging.getLogger(_ROOT_LOGGER)
        root.handlers.clear()
        root.setLevel(logging.WARNING)
