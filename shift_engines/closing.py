"""
Module: shift_engines.closing
Responsibility:
    The close-shift use case: decide whether a shift can be closed, derive
    its totals from the recorded line items (or from raw totals when no
    items were logged), apply corrective adjustments, compute hours worked,
    and run the settlement.

Architecture position:
    Engines -- pure orchestration of the aggregation, hours and settlement
    engines.  Knows nothing about sessions, HTTP or persistence; the
    settlement service feeds it snapshots and stores the outcome.

Invariants enforced:
    - A missing shift or an already closed shift never reaches settlement.
    - Hours are only computed when the staff member has a positive hourly
      rate and the shift has an open timestamp.
    - Totals handed to the settlement are non-negative.

Failure modes:
    - None.  Status problems are reported as outcome kinds, not raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from shift_engines.aggregation import (
    apply_adjustments,
    sum_consumables_amount,
    sum_service_amount,
)
from shift_engines.hours import calculate_hours_worked
from shift_engines.settlement import (
    DEFAULT_PERCENT_MASTER,
    DEFAULT_PERCENT_SALON,
    PaymentMode,
    ShiftFinancialResult,
    calculate_shift_financials,
)
from shift_kernel.domain.dtos import ShiftSnapshot, ShiftStatus, StaffFinanceSettings
from shift_kernel.domain.numeric import (
    ZERO,
    NumericInput,
    non_negative_or_zero,
    to_decimal,
)
from shift_kernel.logging_config import get_logger

logger = get_logger("engines.closing")


class CloseShiftOutcomeKind(str, Enum):
    NO_SHIFT = "no_shift"
    ALREADY_CLOSED = "already_closed"
    OK = "ok"


@dataclass(frozen=True)
class CloseShiftOutcome:
    """
    Result of the close-shift use case.

    Only ``OK`` outcomes carry totals, hours and financials.
    """

    kind: CloseShiftOutcomeKind
    current_status: ShiftStatus | None = None
    total_amount: Decimal = ZERO
    total_consumables: Decimal = ZERO
    hours_worked: Decimal | None = None
    financials: ShiftFinancialResult | None = None

    @property
    def is_ok(self) -> bool:
        return self.kind == CloseShiftOutcomeKind.OK


def close_shift(
    *,
    now: datetime,
    staff: StaffFinanceSettings,
    shift: ShiftSnapshot | None,
    items: Sequence[Any] = (),
    total_amount_raw: NumericInput = 0,
    consumables_amount_raw: NumericInput = 0,
    adjustments: Iterable[Any] = (),
    payment_mode: PaymentMode | str | None = None,
    default_percent_master: NumericInput = DEFAULT_PERCENT_MASTER,
    default_percent_salon: NumericInput = DEFAULT_PERCENT_SALON,
) -> CloseShiftOutcome:
    """
    Close ``shift`` at ``now`` and settle it.

    Args:
        now: Close timestamp (from the caller's clock).
        staff: Compensation settings of the shift's staff member.
        shift: Snapshot of the shift, or None if it does not exist.
        items: Line items logged during the shift.
        total_amount_raw: Revenue to use when no items were logged.
        consumables_amount_raw: Consumables to use when no items were logged.
        adjustments: Signed corrections applied after aggregation.
        payment_mode: Payout mode passed through to the settlement.
        default_percent_master: Used when the staff percent is missing.
        default_percent_salon: Used when the staff percent is missing.
    """
    if shift is None:
        return CloseShiftOutcome(kind=CloseShiftOutcomeKind.NO_SHIFT)

    if shift.is_closed:
        return CloseShiftOutcome(
            kind=CloseShiftOutcomeKind.ALREADY_CLOSED,
            current_status=shift.status,
        )

    percent_master = (
        staff.percent_master if staff.percent_master is not None else default_percent_master
    )
    percent_salon = (
        staff.percent_salon if staff.percent_salon is not None else default_percent_salon
    )
    hourly_rate = to_decimal(staff.hourly_rate)

    item_list = [it for it in (items or ()) if it is not None]
    if item_list:
        base_amount = sum_service_amount(item_list)
        base_consumables = sum_consumables_amount(item_list)
    else:
        base_amount = non_negative_or_zero(total_amount_raw)
        base_consumables = non_negative_or_zero(consumables_amount_raw)

    totals = apply_adjustments(base_amount, base_consumables, adjustments)

    hours_worked: Decimal | None = None
    if hourly_rate is not None and hourly_rate > ZERO and shift.opened_at is not None:
        hours_worked = calculate_hours_worked(shift.opened_at, now)
        logger.debug("hours_calculated", extra={
            "opened_at": shift.opened_at.isoformat(),
            "closed_at": now.isoformat(),
            "hours_worked": str(hours_worked),
        })

    financials = calculate_shift_financials(
        total_amount=totals.total_amount,
        total_consumables=totals.total_consumables,
        percent_master=percent_master,
        percent_salon=percent_salon,
        hours_worked=hours_worked,
        hourly_rate=hourly_rate,
        payment_mode=payment_mode,
    )

    logger.info("shift_close_settled", extra={
        "shift_id": str(shift.shift_id),
        "item_count": len(item_list),
        "total_amount": str(totals.total_amount),
        "total_consumables": str(totals.total_consumables),
        "hours_worked": str(hours_worked) if hours_worked is not None else None,
    })

    return CloseShiftOutcome(
        kind=CloseShiftOutcomeKind.OK,
        current_status=shift.status,
        total_amount=totals.total_amount,
        total_consumables=totals.total_consumables,
        hours_worked=hours_worked,
        financials=financials,
    )
