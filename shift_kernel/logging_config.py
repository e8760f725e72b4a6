"""
shift_kernel.logging_config -- Structured JSON logging.

Every record under the ``shift_kernel`` logger namespace is rendered as one
JSON object per line.  Request-scoped identifiers (the shift being settled,
the staff member, the acting user) live in ``LogContext`` and are merged
into every record emitted while they are bound, so engine and service
events can be correlated without threading ids through every call.

Record layout:
    ts, level, logger, message            always present
    correlation_id, shift_id, ...         from LogContext, when bound
    <extra keys>                          from ``logger.x(..., extra={...})``
    exc_type, exc_message, exc_code,
    exc_<attr>, traceback                 when logged with exc_info

Decimals, UUIDs and datetimes are serialized as strings.
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
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator
from uuid import UUID

_LOGGER_PREFIX = "shift_kernel"


# ---------------------------------------------------------------------------
# Context propagation
# ---------------------------------------------------------------------------


class LogContext:
    """Request-scoped log fields, isolated per thread and per asyncio task."""

    FIELDS: tuple[str, ...] = (
        "correlation_id",
        "shift_id",
        "staff_id",
        "actor_id",
        "trace_id",
    )

    _vars: dict[str, ContextVar[str | None]] = {
        name: ContextVar(f"shift_log_{name}", default=None) for name in FIELDS
    }

    @classmethod
    def _var(cls, name: str) -> ContextVar[str | None]:
        try:
            return cls._vars[name]
        except KeyError:
            raise ValueError(f"Unknown log context field: {name}") from None

    @classmethod
    def set(cls, **fields: Any) -> None:
        """Set context fields.  ``None`` values leave the field untouched."""
        for name, value in fields.items():
            if value is not None:
                cls._var(name).set(str(value))

    @classmethod
    def get_all(cls) -> dict[str, str]:
        """Bound fields only, in declaration order."""
        return {
            name: var.get()
            for name, var in cls._vars.items()
            if var.get() is not None
        }

    @classmethod
    def clear(cls) -> None:
        for var in cls._vars.values():
            var.set(None)

    @classmethod
    @contextmanager
    def bind(cls, **fields: Any) -> Iterator[type["LogContext"]]:
        """Bind fields for the duration of a ``with`` block, then restore them."""
        tokens = [
            (cls._var(name), cls._var(name).set(str(value)))
            for name, value in fields.items()
            if value is not None
        ]
        try:
            yield cls
        finally:
            for var, token in reversed(tokens):
                var.reset(token)


# ---------------------------------------------------------------------------
# JSON rendering
# ---------------------------------------------------------------------------

# Attributes every LogRecord carries; anything else came from ``extra``.
_RECORD_ATTRS: frozenset[str] = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None))
) | {"message", "asctime", "taskName"}


def _json_default(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (Decimal, UUID)):
        return str(value)
    return repr(value)


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

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in payload:
                payload[key] = value

        if record.exc_info and record.exc_info[1] is not None:
            payload.update(self._exception_fields(record))

        return json.dumps(payload, default=_json_default)

    def _exception_fields(self, record: logging.LogRecord) -> dict[str, Any]:
        exc = record.exc_info[1]
        fields: dict[str, Any] = {
            "exc_type": type(exc).__name__,
            "exc_message": str(exc),
        }
        code = getattr(exc, "code", None)
        if code is not None:
            fields["exc_code"] = code
        # ShiftKernelError subclasses keep their context as public attributes
        for name, value in vars(exc).items():
            if not name.startswith("_") and name != "code":
                fields[f"exc_{name}"] = value
        fields["traceback"] = self.formatException(record.exc_info)
        return fields


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------


def get_logger(name: str) -> logging.Logger:
    """``get_logger("engines.settlement")`` -> ``shift_kernel.engines.settlement``."""
    return logging.getLogger(f"{_LOGGER_PREFIX}.{name}")


_state = {"configured": False}
_state_lock = threading.Lock()


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream: Any = None,
    handler: logging.Handler | None = None,
) -> None:
    """
    Attach a JSON handler to the ``shift_kernel`` logger.

    Only the first call has an effect; later calls return immediately so
    libraries and scripts can both call it safely.  ``level`` accepts a
    number or a level name such as ``"DEBUG"``.
    """
    with _state_lock:
        if _state["configured"]:
            return
        _state["configured"] = True

    if handler is None:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(StructuredFormatter())

    root = logging.getLogger(_LOGGER_PREFIX)
    root.setLevel(level.upper() if isinstance(level, str) else level)
    root.propagate = False
    root.addHandler(handler)


def reset_logging() -> None:
    """Undo ``configure_logging``.  Test helper."""
    with _state_lock:
        _state["configured"] = False
    root = logging.getLogger(_LOGGER_PREFIX)
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.setLevel(logging.WARNING)
    root.propagate = True
