"""
shift_engines.tracer -- SHIFT_ENGINE_TRACE records for engine calls.

Responsibility:
    ``@traced_engine`` marks an engine entry point.  Each call logs which
    engine ran (name and version), how long it took, and a short
    fingerprint of the inputs that determine its result.  Two calls with
    the same fingerprint under the same engine version must settle
    identically, which is what makes a stored settlement replayable.

Architecture position:
    Engines -- support code for the pure calculation layer.  The only
    side effect is the log record.

Invariants enforced:
    - Fingerprints depend on values, not on representation: Decimal("10")
      and Decimal("10.00") hash the same, enums hash by value, mappings
      hash independently of key order.
    - Arguments are matched to fingerprint fields by parameter name, so
      positional and keyword calls fingerprint the same.
    - The wrapped function's arguments and result pass through untouched.

Usage:
    @traced_engine("settlement", "1.0", fingerprint_fields=("total_amount",))
    def calculate_shift_financials(*, total_amount, ...):
        ...
"""

from __future__ import annotations

import dataclasses
import functools
import hashlib
import inspect
import time
from collections.abc import Callable, Mapping
from decimal import Decimal
from enum import Enum
from typing import Any

from shift_kernel.logging_config import get_logger

_logger = get_logger("engines.tracer")

_FINGERPRINT_LENGTH = 16


def _canonicalize(value: Any) -> str:
    """Render ``value`` as a deterministic string for hashing."""
    if value is None:
        return "null"
    if isinstance(value, Enum):
        return _canonicalize(value.value)
    if isinstance(value, Decimal):
        return str(value.normalize()) if value.is_finite() else str(value)
    if isinstance(value, (bool, int, float, str)):
        return str(value)
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return _canonicalize(
            {f.name: getattr(value, f.name) for f in dataclasses.fields(value)}
        )
    if isinstance(value, Mapping):
        pairs = sorted((str(k), _canonicalize(v)) for k, v in value.items())
        return "{" + ",".join(f"{k}:{v}" for k, v in pairs) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ",".join(map(_canonicalize, value)) + "]"
    return str(value)


def compute_input_fingerprint(
    fingerprint_fields: tuple[str, ...],
    arguments: Mapping[str, Any],
) -> str:
    """
    SHA-256 prefix over ``field=value`` pairs, in ``fingerprint_fields`` order.

    Fields absent from ``arguments`` hash as ``null``; arguments not named
    in ``fingerprint_fields`` are ignored.
    """
    canonical = "|".join(
        f"{name}={_canonicalize(arguments.get(name))}" for name in fingerprint_fields
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return digest[:_FINGERPRINT_LENGTH]


def traced_engine(
    engine_name: str,
    engine_version: str,
    fingerprint_fields: tuple[str, ...] = (),
) -> Callable:
    """Decorate an engine entry point so each call emits SHIFT_ENGINE_TRACE."""

    def decorator(func: Callable) -> Callable:
        signature = inspect.signature(func)

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            fingerprint = ""
            if fingerprint_fields:
                arguments = signature.bind_partial(*args, **kwargs).arguments
                fingerprint = compute_input_fingerprint(fingerprint_fields, arguments)

            started = time.monotonic()
            result = func(*args, **kwargs)
            elapsed_ms = round((time.monotonic() - started) * 1000, 2)

            _logger.info("SHIFT_ENGINE_TRACE", extra={
                "trace_type": "SHIFT_ENGINE_TRACE",
                "engine_name": engine_name,
                "engine_version": engine_version,
                "function": func.__qualname__,
                "input_fingerprint": fingerprint,
                "duration_ms": elapsed_ms,
            })
            return result

        return wrapper

    return decorator
