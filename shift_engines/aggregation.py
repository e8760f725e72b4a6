"""
Module: shift_engines.aggregation
Responsibility:
    Reduce the per-client line items recorded during a shift, and any
    signed corrective adjustments, to the two scalar totals the settlement
    consumes: gross service revenue and consumables cost.

Architecture position:
    Engines -- pure calculation layer, zero I/O.  Leaf component.

Invariants enforced:
    - Line items: missing, NaN, infinite and negative amounts contribute 0.
      A point-of-sale entry can never reduce the shift total.
    - Adjustments: deltas keep their sign (refunds are negative), but each
      adjusted total is floored at 0.  A shift cannot owe negative revenue.

Failure modes:
    - None.  Invalid numbers degrade silently to a 0 contribution; inputs
      are assumed to have passed request-level validation already.

Usage:
    from shift_engines.aggregation import (
        ShiftLineItem, ShiftAdjustment,
        sum_service_amount, sum_consumables_amount, apply_adjustments,
    )

    items = [ShiftLineItem(service_amount=1000, consumables_amount=50)]
    totals = apply_adjustments(
        sum_service_amount(items),
        sum_consumables_amount(items),
        [ShiftAdjustment(service_delta=-200)],
    )
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from shift_engines.tracer import traced_engine
from shift_kernel.domain.numeric import (
    ZERO,
    NumericInput,
    non_negative_or_zero,
    signed_or_zero,
)
from shift_kernel.logging_config import get_logger

logger = get_logger("engines.aggregation")


@dataclass(frozen=True)
class ShiftLineItem:
    """
    One client transaction recorded during a shift.

    Contract:
        Amounts are stored as given; the clamping rule is applied by the
        summing functions, not at construction.
    """

    service_amount: NumericInput = None
    consumables_amount: NumericInput = None
    client_name: str | None = None
    service_name: str | None = None


@dataclass(frozen=True)
class ShiftAdjustment:
    """A signed correction (refund or manual fix) applied after aggregation."""

    service_delta: NumericInput = None
    consumables_delta: NumericInput = None
    reason: str | None = None


@dataclass(frozen=True)
class AdjustedTotals:
    """Shift totals after adjustments.  Both values are >= 0."""

    total_amount: Decimal
    total_consumables: Decimal


# Older clients send the service amount of a line item as ``amount``
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "service_amount": ("amount",),
}


def _read(record: Any, name: str) -> Any:
    # Accepts value objects, ORM rows and plain dicts alike
    for key in (name, *_FIELD_ALIASES.get(name, ())):
        if isinstance(record, Mapping):
            value = record.get(key)
        else:
            value = getattr(record, key, None)
        if value is not None:
            return value
    return None


def _sum_clamped(items: Iterable[Any] | None, name: str) -> Decimal:
    total = ZERO
    for item in items or ():
        if item is None:
            continue
        total += non_negative_or_zero(_read(item, name))
    return total


def sum_service_amount(items: Iterable[Any] | None) -> Decimal:
    """
    Sum ``service_amount`` across items; invalid or negative values count as 0.

    An item without ``service_amount`` is read through its ``amount`` field.
    """
    return _sum_clamped(items, "service_amount")


def sum_consumables_amount(items: Iterable[Any] | None) -> Decimal:
    """Sum ``consumables_amount`` across items; invalid or negative values count as 0."""
    return _sum_clamped(items, "consumables_amount")


@traced_engine("aggregation", "1.0", fingerprint_fields=("base_service_amount", "base_consumables_amount"))
def apply_adjustments(
    base_service_amount: NumericInput,
    base_consumables_amount: NumericInput,
    adjustments: Iterable[Any] | None = (),
) -> AdjustedTotals:
    """
    Apply signed adjustments to aggregated totals.

    Preconditions:
        Bases are the (already non-negative) line-item sums.

    Postconditions:
        - With no adjustments the bases are returned unchanged.
        - Otherwise each total is ``max(0, base + sum(deltas))``; deltas
          keep their sign, missing/NaN deltas count as 0.
    """
    base_service = signed_or_zero(base_service_amount)
    base_consumables = signed_or_zero(base_consumables_amount)

    adjustment_list = [a for a in (adjustments or ()) if a is not None]
    if not adjustment_list:
        return AdjustedTotals(
            total_amount=base_service,
            total_consumables=base_consumables,
        )

    service_delta = sum(
        (signed_or_zero(_read(a, "service_delta")) for a in adjustment_list),
        ZERO,
    )
    consumables_delta = sum(
        (signed_or_zero(_read(a, "consumables_delta")) for a in adjustment_list),
        ZERO,
    )

    result = AdjustedTotals(
        total_amount=max(ZERO, base_service + service_delta),
        total_consumables=max(ZERO, base_consumables + consumables_delta),
    )

    logger.debug("adjustments_applied", extra={
        "adjustment_count": len(adjustment_list),
        "service_delta": str(service_delta),
        "consumables_delta": str(consumables_delta),
        "total_amount": str(result.total_amount),
        "total_consumables": str(result.total_consumables),
    })
    return result
