"""
Module: shift_engines.settlement
Responsibility:
    Turn a shift's gross service revenue and consumables cost into the
    split between the staff member ("master") and the business ("salon"),
    applying percentage normalization, the hourly guaranteed minimum, and
    the top-up the business pays when the guarantee exceeds the natural
    share.  The result is the authoritative financial record for a shift.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import shift_kernel/domain and sibling engine modules.

Invariants enforced:
    - Normalized percentages always sum to 100.
    - Consumables are attributed entirely to the business side.
    - Base shares are rounded to whole currency units; the guarantee and
      the top-up are rounded to cents.  The two precisions are distinct.
    - ``final_master_share == guaranteed_amount`` whenever the guarantee
      exceeds the base master share.
    - ``final_salon_share >= 0``.  A top-up larger than the business
      share is absorbed down to 0 and the remainder is not recovered
      (see ``ShiftFinancialResult.uncovered_topup``).

Failure modes:
    - None.  The engine is total: missing or invalid percentages fall back
      to 60/40, missing or non-positive hours/rate disable the guarantee,
      and negative totals are taken as-is (upstream aggregation owns the
      non-negativity of totals).

Audit relevance:
    The result is persisted verbatim on the closed shift.  Every call is
    traced via ``@traced_engine`` with a fingerprint of its inputs, so a
    stored settlement can be replayed and compared.

Usage:
    from shift_engines.settlement import calculate_shift_financials

    result = calculate_shift_financials(
        total_amount=10000,
        total_consumables=500,
        percent_master=60,
        percent_salon=40,
        hours_worked=8,
        hourly_rate=1000,
    )
    result.final_master_share   # Decimal("8000.00")
    result.final_salon_share    # Decimal("2500.00")
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from shift_engines.tracer import traced_engine
from shift_kernel.domain.numeric import (
    HUNDRED,
    ZERO,
    NumericInput,
    round_cents,
    round_units,
    signed_or_zero,
    to_decimal,
)
from shift_kernel.logging_config import get_logger

logger = get_logger("engines.settlement")

DEFAULT_PERCENT_MASTER = Decimal("60")
DEFAULT_PERCENT_SALON = Decimal("40")


class PaymentMode(str, Enum):
    """How a shift is paid out."""

    PERCENT_WITH_GUARANTEE = "percent_with_guarantee"  # Percent + hourly minimum
    PERCENT_ONLY = "percent_only"  # Guarantee ignored
    # Extension points; settle exactly like PERCENT_WITH_GUARANTEE for now
    FIXED_PER_SHIFT = "fixed_per_shift"
    CUSTOM = "custom"

    @classmethod
    def coerce(cls, value: "PaymentMode | str | None") -> "PaymentMode":
        """Map a mode or its string value to a PaymentMode; unknown -> default."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                logger.warning("unknown_payment_mode", extra={"payment_mode": value})
        return cls.PERCENT_WITH_GUARANTEE


@dataclass(frozen=True)
class NormalizedSplit:
    """Effective master/salon percentages.  ``master + salon == 100``."""

    master: Decimal
    salon: Decimal

    def __iter__(self) -> Iterator[Decimal]:
        yield self.master
        yield self.salon


@dataclass(frozen=True)
class ShiftFinancialResult:
    """
    Complete settlement of one shift.

    Contract:
        Frozen dataclass; treated as immutable once produced.
    Guarantees:
        - ``final_salon_share >= 0`` and ``final_master_share >= 0`` for
          non-negative totals.
        - ``topup_amount == 0`` unless the guarantee exceeded the base
          master share.
    Non-goals:
        - Does not persist itself; callers store it on the shift row.
    """

    total_amount: Decimal
    total_consumables: Decimal
    base_master_share: Decimal
    base_salon_share: Decimal
    guaranteed_amount: Decimal
    topup_amount: Decimal
    final_master_share: Decimal
    final_salon_share: Decimal
    normalized_percent_master: Decimal
    normalized_percent_salon: Decimal
    payment_mode: PaymentMode = PaymentMode.PERCENT_WITH_GUARANTEE

    @property
    def has_topup(self) -> bool:
        return self.topup_amount > ZERO

    @property
    def uncovered_topup(self) -> Decimal:
        """Part of the top-up the business share could not absorb."""
        absorbed = self.base_salon_share - self.final_salon_share
        return max(ZERO, self.topup_amount - absorbed)

    def to_dict(self) -> dict[str, Any]:
        """Plain dict with string amounts, for logs and API payloads."""
        return {
            "total_amount": str(self.total_amount),
            "total_consumables": str(self.total_consumables),
            "base_master_share": str(self.base_master_share),
            "base_salon_share": str(self.base_salon_share),
            "guaranteed_amount": str(self.guaranteed_amount),
            "topup_amount": str(self.topup_amount),
            "final_master_share": str(self.final_master_share),
            "final_salon_share": str(self.final_salon_share),
            "normalized_percent_master": str(self.normalized_percent_master),
            "normalized_percent_salon": str(self.normalized_percent_salon),
            "payment_mode": self.payment_mode.value,
        }


def normalize_percentages(
    percent_master: NumericInput,
    percent_salon: NumericInput,
) -> NormalizedSplit:
    """
    Scale a master/salon split so it sums to exactly 100.

    Postconditions:
        - Falls back to 60/40 when either value is missing, invalid or
          negative, or when their sum is not positive.
        - Otherwise ``master = pm / (pm + ps) * 100`` and
          ``salon = 100 - master``.

    Example:
        normalize_percentages(30, 20)  ->  NormalizedSplit(60, 40)
    """
    master = to_decimal(percent_master)
    salon = to_decimal(percent_salon)

    if master is None or salon is None or master < ZERO or salon < ZERO:
        return NormalizedSplit(DEFAULT_PERCENT_MASTER, DEFAULT_PERCENT_SALON)

    total = master + salon
    if total <= ZERO:
        return NormalizedSplit(DEFAULT_PERCENT_MASTER, DEFAULT_PERCENT_SALON)

    normalized_master = master / total * HUNDRED
    return NormalizedSplit(normalized_master, HUNDRED - normalized_master)


def calculate_guaranteed_amount(
    hours_worked: NumericInput,
    hourly_rate: NumericInput,
) -> Decimal:
    """``hours * rate`` rounded to cents; 0 unless both are present and > 0."""
    hours = to_decimal(hours_worked)
    rate = to_decimal(hourly_rate)
    if hours is None or rate is None or hours <= ZERO or rate <= ZERO:
        return ZERO
    return round_cents(hours * rate)


@traced_engine(
    "settlement",
    "1.0",
    fingerprint_fields=(
        "total_amount",
        "total_consumables",
        "percent_master",
        "percent_salon",
        "hours_worked",
        "hourly_rate",
        "payment_mode",
    ),
)
def calculate_shift_financials(
    *,
    total_amount: NumericInput,
    total_consumables: NumericInput,
    percent_master: NumericInput,
    percent_salon: NumericInput,
    hours_worked: NumericInput = None,
    hourly_rate: NumericInput = None,
    payment_mode: PaymentMode | str | None = None,
) -> ShiftFinancialResult:
    """
    Settle a shift.

    Steps:
        1. Normalize the percentage split (fallback 60/40).
        2. Base shares: master = round(total * m / 100); salon =
           round(total * s / 100) + consumables.
        3. Guarantee = round(hours * rate, 2) when both are positive.
        4. If the guarantee exceeds the base master share the business
           tops up the difference out of its own share, floored at 0.
        5. Final shares are expressed in cents.

    Args:
        total_amount: Gross service revenue for the shift.
        total_consumables: Consumables cost for the shift.
        percent_master: Staff percentage (any scale).
        percent_salon: Business percentage (any scale).
        hours_worked: Hours attributed to the shift, or None.
        hourly_rate: Guaranteed hourly wage, or None.
        payment_mode: PaymentMode or its value; default percent + guarantee.

    Returns:
        ShiftFinancialResult with base, guarantee, top-up and final values.
    """
    t0 = time.monotonic()
    mode = PaymentMode.coerce(payment_mode)
    amount = signed_or_zero(total_amount)
    consumables = signed_or_zero(total_consumables)

    logger.debug("shift_settlement_started", extra={
        "total_amount": str(amount),
        "total_consumables": str(consumables),
        "payment_mode": mode.value,
    })

    split = normalize_percentages(percent_master, percent_salon)

    base_master_share = round_units(amount * split.master / HUNDRED)
    base_salon_share = round_units(amount * split.salon / HUNDRED) + consumables

    if mode is PaymentMode.PERCENT_ONLY:
        guaranteed_amount = ZERO
    else:
        guaranteed_amount = calculate_guaranteed_amount(hours_worked, hourly_rate)

    if guaranteed_amount > base_master_share:
        # Business covers the shortfall but never goes below zero
        topup_amount = round_cents(guaranteed_amount - base_master_share)
        final_master_share = guaranteed_amount
        final_salon_share = max(ZERO, base_salon_share - topup_amount)
    else:
        topup_amount = ZERO
        final_master_share = base_master_share
        final_salon_share = base_salon_share

    result = ShiftFinancialResult(
        total_amount=amount,
        total_consumables=consumables,
        base_master_share=base_master_share,
        base_salon_share=base_salon_share,
        guaranteed_amount=guaranteed_amount,
        topup_amount=topup_amount,
        final_master_share=round_cents(final_master_share),
        final_salon_share=round_cents(final_salon_share),
        normalized_percent_master=split.master,
        normalized_percent_salon=split.salon,
        payment_mode=mode,
    )

    duration_ms = round((time.monotonic() - t0) * 1000, 2)
    logger.info("shift_settlement_completed", extra={
        "final_master_share": str(result.final_master_share),
        "final_salon_share": str(result.final_salon_share),
        "guaranteed_amount": str(result.guaranteed_amount),
        "topup_amount": str(result.topup_amount),
        "uncovered_topup": str(result.uncovered_topup),
        "duration_ms": duration_ms,
    })
    if result.uncovered_topup > ZERO:
        logger.warning("shift_topup_exceeds_business_share", extra={
            "topup_amount": str(result.topup_amount),
            "base_salon_share": str(result.base_salon_share),
            "uncovered_topup": str(result.uncovered_topup),
        })
    return result
