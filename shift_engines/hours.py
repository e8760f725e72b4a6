"""
Module: shift_engines.hours
Responsibility:
    Hours attributed to a shift: elapsed wall-clock time between open and
    close, and validation of a manual hours correction.

Architecture position:
    Engines -- pure calculation layer.  Never reads a clock; the caller
    passes the close timestamp (from an injected ``Clock``).

Failure modes:
    - ``calculate_hours_worked`` is total.
    - ``normalize_corrected_hours`` raises ``InvalidHoursError`` -- it is
      the request-level validation step for a manual correction, where a
      bad value must be rejected rather than defaulted.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from decimal import Decimal

from shift_kernel.domain.numeric import ZERO, NumericInput, round_cents, to_decimal
from shift_kernel.exceptions import InvalidHoursError
from shift_kernel.logging_config import get_logger

logger = get_logger("engines.hours")

DEFAULT_MAX_CORRECTED_HOURS = Decimal("48")

_MICROSECONDS_PER_HOUR = Decimal(3600 * 1_000_000)


def calculate_hours_worked(
    opened_at: datetime | None,
    closed_at: datetime | None,
) -> Decimal | None:
    """
    Elapsed hours from ``opened_at`` to ``closed_at``, rounded to cents.

    Postconditions:
        - ``None`` when either timestamp is missing.
        - ``0`` when the close precedes the open.
    """
    if opened_at is None or closed_at is None:
        return None
    elapsed_us = (closed_at - opened_at) // timedelta(microseconds=1)
    if elapsed_us <= 0:
        return ZERO
    return round_cents(Decimal(elapsed_us) / _MICROSECONDS_PER_HOUR)


def normalize_corrected_hours(
    hours_worked: NumericInput,
    max_hours: Decimal = DEFAULT_MAX_CORRECTED_HOURS,
) -> Decimal:
    """
    Validate a manually corrected hours value and round it to cents.

    Raises:
        InvalidHoursError: value is missing, not finite, negative, or
            greater than ``max_hours``.
    """
    hours = to_decimal(hours_worked)
    if hours is None or hours < ZERO or hours > max_hours:
        logger.warning("invalid_hours_rejected", extra={
            "hours_worked": str(hours_worked),
            "max_hours": str(max_hours),
        })
        raise InvalidHoursError(hours_worked, max_hours)
    return round_cents(hours)
