"""
Structured JSON logging for the returns kernel.

Every record under the ``returns_kernel`` logger is rendered as one JSON
line.  While a ``ReturnEditor`` operation runs, records also carry the
return, the acting user and the operation name, bound through
``LogContext``; nested operations rebind ``operation`` and restore the
outer value on exit.
"""

__all__ = [
    "CONTEXT_FIELDS",
    "LOGGER_NAME",
    "LogContext",
    "StructuredFormatter",
    "configure_logging",
    "get_logger",
    "reset_logging",
]

import json
import logging
import sys
import threading
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from types import MappingProxyType
from typing import Any
from uuid import UUID

LOGGER_NAME = "returns_kernel"

CONTEXT_FIELDS = ("return_id", "actor_id", "operation")

_EMPTY: Mapping[str, str] = MappingProxyType({})
_context: ContextVar[Mapping[str, str]] = ContextVar(
    "returns_kernel_log_context", default=_EMPTY
)


class LogContext:
    """Per-operation log fields, isolated per thread and per task."""

    @staticmethod
    def current() -> dict[str, str]:
        return dict(_context.get())

    @staticmethod
    @contextmanager
    def bind(**fields: str | None) -> Iterator[None]:
        """
        Layer ``fields`` over the current context for the block.

        None values leave the outer value in place.

        Raises:
            ValueError: For a name outside ``CONTEXT_FIELDS``.
        """
        unknown = set(fields) - set(CONTEXT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown log context fields: {sorted(unknown)}")
        merged = dict(_context.get())
        merged.update((k, v) for k, v in fields.items() if v is not None)
        token = _context.set(MappingProxyType(merged))
        try:
            yield
        finally:
            _context.reset(token)

    @staticmethod
    def clear() -> None:
        _context.set(_EMPTY)


# Attributes every LogRecord has; anything else came in through ``extra``.
_RECORD_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _to_json(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.name
    if isinstance(value, (UUID, Decimal)):
        return str(value)
    return repr(value)


def _exception_fields(exc: BaseException) -> dict[str, Any]:
    # Kernel errors expose their context as public attributes
    fields: dict[str, Any] = {
        "exc_type": type(exc).__name__,
        "exc_message": str(exc),
    }
    code = getattr(exc, "code", None)
    if code is not None:
        fields["exc_code"] = code
    fields.update(
        (f"exc_{name}", value)
        for name, value in vars(exc).items()
        if not name.startswith("_")
    )
    return fields


class StructuredFormatter(logging.Formatter):
    """One JSON object per record: header, bound context, then extras."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        payload.update(_context.get())
        payload.update(
            (key, value)
            for key, value in vars(record).items()
            if key not in _RECORD_ATTRS
        )
        if record.exc_info and record.exc_info[1] is not None:
            payload.update(_exception_fields(record.exc_info[1]))
            payload["traceback"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=_to_json)


def get_logger(name: str) -> logging.Logger:
    """Logger ``returns_kernel.<name>``."""
    return logging.getLogger(f"{LOGGER_NAME}.{name}")


_HANDLER_FLAG = "_returns_kernel_handler"
_lock = threading.Lock()


def configure_logging(
    *,
    level: int = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> logging.Handler:
    """
    Route ``returns_kernel`` records through a JSON handler.

    The first call attaches ``handler`` (default: a stream handler on
    ``stream`` or stderr).  Later calls only change the level and return
    the handler already attached.
    """
    logger = logging.getLogger(LOGGER_NAME)
    with _lock:
        logger.setLevel(level)
        logger.propagate = False
        for existing in logger.handlers:
            if getattr(existing, _HANDLER_FLAG, False):
                return existing

        attached = handler if handler is not None else logging.StreamHandler(
            stream or sys.stderr
        )
        attached.setFormatter(StructuredFormatter())
        setattr(attached, _HANDLER_FLAG, True)
        logger.addHandler(attached)
        return attached


def reset_logging() -> None:
    """Detach the handler added by ``configure_logging`` and restore defaults."""
    logger = logging.getLogger(LOGGER_NAME)
    with _lock:
        for existing in list(logger.handlers):
            if getattr(existing, _HANDLER_FLAG, False):
                logger.removeHandler(existing)
        logger.setLevel(logging.NOTSET)
        logger.propagate = True
