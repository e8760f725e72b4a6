"""
Numeric -- Lenient Decimal coercion and currency rounding.

Responsibility:
    Converts loosely-typed numeric input (``Decimal``, ``int``, ``float``,
    ``str`` or ``None``) coming from request bodies and database rows into
    finite ``Decimal`` values, and provides the two rounding precisions the
    settlement uses (whole currency units and cents).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by ``shift_engines``.  No outward dependencies.

Invariants enforced:
    - Decimal-only arithmetic downstream: floats are converted through
      ``str()`` so binary noise never enters a settlement.
    - Leniency: invalid input (NaN, Infinity, unparsable strings, bools)
      becomes ``None`` -- callers decide the safe default.  Nothing here
      raises on bad input.
    - Range: accepted values are bounded by the largest finite double.
      Anything beyond it is treated like Infinity, i.e. invalid.
    - Rounding sends halves toward +Infinity (2.5 -> 3, -2.5 -> -2) at
      any magnitude; the working precision is widened to fit the value.

Failure modes:
    - None.  Every helper is total.
"""

from __future__ import annotations

import sys
from decimal import (
    ROUND_HALF_DOWN,
    ROUND_HALF_UP,
    Decimal,
    InvalidOperation,
    localcontext,
)
from typing import Union

NumericInput = Union[Decimal, int, float, str, None]

ZERO = Decimal("0")
HUNDRED = Decimal("100")

_UNITS = Decimal("1")
_CENTS = Decimal("0.01")

_MAX_FINITE = Decimal(sys.float_info.max)


def to_decimal(value: NumericInput) -> Decimal | None:
    """
    Coerce ``value`` to a finite Decimal, or ``None`` when it is not one.

    Postconditions:
        - Returns ``None`` for ``None``, ``bool``, unparsable strings,
          NaN, +/-Infinity and magnitudes above the largest double.
        - Never raises.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value).strip())
        except (InvalidOperation, ValueError, TypeError):
            return None
    if not result.is_finite() or abs(result) > _MAX_FINITE:
        return None
    return result


def non_negative_or_zero(value: NumericInput) -> Decimal:
    """Coerce ``value``; missing, invalid and negative values become 0."""
    result = to_decimal(value)
    if result is None or result < ZERO:
        return ZERO
    return result


def signed_or_zero(value: NumericInput) -> Decimal:
    """Coerce ``value`` preserving sign; missing or invalid values become 0."""
    result = to_decimal(value)
    return ZERO if result is None else result


def _round_half_toward_positive(value: Decimal, quantum: Decimal) -> Decimal:
    # quantize needs every integer digit plus the kept fraction digits
    digits = value.adjusted() - quantum.as_tuple().exponent + 2
    rounding = ROUND_HALF_UP if value >= ZERO else ROUND_HALF_DOWN
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, digits)
        return value.quantize(quantum, rounding=rounding)


def round_units(value: Decimal) -> Decimal:
    """Round to whole currency units, halves toward +Infinity."""
    return _round_half_toward_positive(value, _UNITS)


def round_cents(value: Decimal) -> Decimal:
    """Round to 2 decimal places, halves toward +Infinity."""
    return _round_half_toward_positive(value, _CENTS)
