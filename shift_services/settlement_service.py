"""
shift_services.settlement_service -- Shift lifecycle and settlement persistence.

Responsibility:
    Opens shifts, records client line items, closes shifts by running the
    pure close-shift use case over the stored items, and applies manual
    hours corrections to closed shifts.  Writes the settlement snapshot
    onto the ``staff_shifts`` row.

Architecture position:
    Services -- stateful orchestration over engines + kernel.
    Composes the kernel models and the pure engines
    (shift_engines.closing, shift_engines.settlement, shift_engines.hours).

Invariants enforced:
    - Flush-only: the caller owns commit/rollback.
    - At most one settlement per shift: the shift row is loaded with
      SELECT ... FOR UPDATE (PostgreSQL) before it is closed or corrected,
      and the status check happens under that lock.
    - A closed shift accepts no new items; only an explicit hours
      correction may re-run its settlement.

Failure modes:
    - ShiftNotFoundError: unknown shift id.
    - ShiftAlreadyOpenError: staff already has a shift on that date.
    - ShiftAlreadyClosedError: close or add item on a closed shift.
    - ShiftNotClosedError: hours correction on an open shift.
    - InvalidHoursError: corrected hours out of range.

Audit relevance:
    Every state change logs a structured event carrying the shift id and
    the resulting financials.  The stored totals and normalized percents
    allow any settlement to be replayed through the engine.

Usage:
    from shift_kernel.db.engine import session_scope
    from shift_kernel.domain.clock import SystemClock
    from shift_services.settlement_service import ShiftSettlementService

    with session_scope() as session:
        service = ShiftSettlementService(session, SystemClock())
        shift = service.close_shift(shift_id, StaffFinanceSettings(60, 40, 500))
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from shift_config import SettlementPolicy, get_settlement_policy
from shift_engines.closing import CloseShiftOutcomeKind, close_shift
from shift_engines.hours import normalize_corrected_hours
from shift_engines.settlement import (
    PaymentMode,
    ShiftFinancialResult,
    calculate_shift_financials,
)
from shift_kernel.domain.clock import Clock
from shift_kernel.domain.dtos import ShiftStatus, StaffFinanceSettings
from shift_kernel.domain.numeric import NumericInput, signed_or_zero, to_decimal
from shift_kernel.exceptions import (
    ShiftAlreadyClosedError,
    ShiftAlreadyOpenError,
    ShiftNotClosedError,
    ShiftNotFoundError,
)
from shift_kernel.logging_config import LogContext, get_logger
from shift_kernel.models.staff_shift import StaffShift, StaffShiftItem
from shift_kernel.services.base import BaseService

logger = get_logger("services.settlement")


class ShiftSettlementService(BaseService[StaffShift]):
    """
    Shift lifecycle service.

    Contract:
        Receives a Session, a Clock and (optionally) a SettlementPolicy.
        All timestamps come from the clock; all money math is delegated
        to the engines.

    Guarantees:
        - ``close_shift`` writes status, closed_at and every settlement
          column in one flush.
        - ``recalculate_hours`` changes only hours, guarantee, top-up and
          final shares; totals and percents stay as settled.

    Non-goals:
        - Authorization and tenant isolation are the caller's concern.
    """

    def __init__(
        self,
        session: Session,
        clock: Clock,
        policy: SettlementPolicy | None = None,
    ):
        super().__init__(session)
        self._clock = clock
        self._policy = policy if policy is not None else get_settlement_policy()

    @property
    def policy(self) -> SettlementPolicy:
        return self._policy

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_shift(self, shift_id: UUID) -> StaffShift | None:
        return self.session.get(StaffShift, shift_id)

    def find_shift(self, staff_id: UUID, shift_date: date) -> StaffShift | None:
        return self.session.execute(
            select(StaffShift).where(
                StaffShift.staff_id == staff_id,
                StaffShift.shift_date == shift_date,
            )
        ).scalar_one_or_none()

    def _lock_shift(self, shift_id: UUID) -> StaffShift | None:
        return self.session.execute(
            select(StaffShift).where(StaffShift.id == shift_id).with_for_update()
        ).scalar_one_or_none()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def open_shift(self, staff_id: UUID, biz_id: UUID, shift_date: date) -> StaffShift:
        """
        Open a shift for ``staff_id`` on ``shift_date`` at the clock's now.

        Raises:
            ShiftAlreadyOpenError: a shift (open or closed) already exists.
        """
        if self.find_shift(staff_id, shift_date) is not None:
            raise ShiftAlreadyOpenError(str(staff_id), shift_date.isoformat())

        shift = StaffShift(
            staff_id=staff_id,
            biz_id=biz_id,
            shift_date=shift_date,
            status=ShiftStatus.OPEN,
            opened_at=self._clock.now(),
        )
        self.session.add(shift)
        self.session.flush()

        logger.info("shift_opened", extra={
            "shift_id": str(shift.id),
            "staff_id": str(staff_id),
            "shift_date": shift_date.isoformat(),
        })
        return shift

    def add_item(
        self,
        shift_id: UUID,
        *,
        service_amount: NumericInput,
        consumables_amount: NumericInput = 0,
        client_name: str | None = None,
        service_name: str | None = None,
        booking_id: UUID | None = None,
        note: str | None = None,
    ) -> StaffShiftItem:
        """
        Record a client transaction on an open shift.

        Amounts are stored as entered (invalid -> 0); the aggregation engine
        clamps negatives when the shift is summed.

        Raises:
            ShiftNotFoundError, ShiftAlreadyClosedError
        """
        shift = self.get_shift(shift_id)
        if shift is None:
            raise ShiftNotFoundError(str(shift_id))
        if shift.is_closed:
            raise ShiftAlreadyClosedError(str(shift_id))

        item = StaffShiftItem(
            client_name=client_name,
            service_name=service_name,
            service_amount=signed_or_zero(service_amount),
            consumables_amount=signed_or_zero(consumables_amount),
            booking_id=booking_id,
            note=note,
        )
        shift.items.append(item)
        self.session.flush()

        logger.debug("shift_item_added", extra={
            "shift_id": str(shift_id),
            "service_amount": str(item.service_amount),
            "consumables_amount": str(item.consumables_amount),
        })
        return item

    def close_shift(
        self,
        shift_id: UUID,
        staff: StaffFinanceSettings,
        *,
        adjustments: Iterable[Any] = (),
        total_amount_raw: NumericInput = 0,
        consumables_amount_raw: NumericInput = 0,
        payment_mode: PaymentMode | str | None = None,
    ) -> StaffShift:
        """
        Close and settle a shift.

        Totals come from the stored line items; when none were logged the
        raw totals are used instead.  Adjustments are applied after
        aggregation.

        Raises:
            ShiftNotFoundError, ShiftAlreadyClosedError
        """
        with LogContext.bind(shift_id=str(shift_id)):
            shift = self._lock_shift(shift_id)
            mode = PaymentMode.coerce(payment_mode or self._policy.default_payment_mode)
            closed_at = self._clock.now()

            outcome = close_shift(
                now=closed_at,
                staff=staff,
                shift=shift.to_snapshot() if shift is not None else None,
                items=list(shift.items) if shift is not None else (),
                total_amount_raw=total_amount_raw,
                consumables_amount_raw=consumables_amount_raw,
                adjustments=adjustments,
                payment_mode=mode,
                default_percent_master=self._policy.default_percent_master,
                default_percent_salon=self._policy.default_percent_salon,
            )

            if outcome.kind == CloseShiftOutcomeKind.NO_SHIFT:
                raise ShiftNotFoundError(str(shift_id))
            if outcome.kind == CloseShiftOutcomeKind.ALREADY_CLOSED:
                logger.warning("shift_close_rejected", extra={
                    "reason": "already_closed",
                })
                raise ShiftAlreadyClosedError(str(shift_id))

            financials = outcome.financials
            shift.total_amount = outcome.total_amount
            shift.consumables_amount = outcome.total_consumables
            shift.percent_master = financials.normalized_percent_master
            shift.percent_salon = financials.normalized_percent_salon
            shift.hours_worked = outcome.hours_worked
            shift.hourly_rate = to_decimal(staff.hourly_rate)
            shift.payment_mode = mode.value
            self._apply_financials(shift, financials)
            shift.status = ShiftStatus.CLOSED
            shift.closed_at = closed_at
            self.session.flush()

            logger.info("shift_closed", extra={
                "staff_id": str(shift.staff_id),
                "policy_id": self._policy.policy_id,
                **financials.to_dict(),
            })
            return shift

    def recalculate_hours(self, shift_id: UUID, hours_worked: NumericInput) -> StaffShift:
        """
        Correct the hours of a closed shift and re-run its settlement.

        The stored totals, normalized percents, hourly rate and payment
        mode are reused; only the hours change.

        Raises:
            ShiftNotFoundError, ShiftNotClosedError, InvalidHoursError
        """
        with LogContext.bind(shift_id=str(shift_id)):
            hours = normalize_corrected_hours(hours_worked, self._policy.max_corrected_hours)

            shift = self._lock_shift(shift_id)
            if shift is None:
                raise ShiftNotFoundError(str(shift_id))
            if not shift.is_closed:
                raise ShiftNotClosedError(str(shift_id), str(ShiftStatus(shift.status).value))

            previous_hours = shift.hours_worked
            financials = calculate_shift_financials(
                total_amount=shift.total_amount,
                total_consumables=shift.consumables_amount,
                percent_master=shift.percent_master,
                percent_salon=shift.percent_salon,
                hours_worked=hours,
                hourly_rate=shift.hourly_rate,
                payment_mode=shift.payment_mode,
            )

            shift.hours_worked = hours
            self._apply_financials(shift, financials)
            self.session.flush()

            logger.info("shift_hours_recalculated", extra={
                "previous_hours": str(previous_hours) if previous_hours is not None else None,
                "hours_worked": str(hours),
                "final_master_share": str(financials.final_master_share),
                "final_salon_share": str(financials.final_salon_share),
                "topup_amount": str(financials.topup_amount),
            })
            return shift

    @staticmethod
    def _apply_financials(shift: StaffShift, financials: ShiftFinancialResult) -> None:
        shift.guaranteed_amount = financials.guaranteed_amount
        shift.topup_amount = financials.topup_amount
        shift.master_share = financials.final_master_share
        shift.salon_share = financials.final_salon_share
