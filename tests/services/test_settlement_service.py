"""
Tests for ShiftSettlementService against an in-memory database.

Covers the shift lifecycle (open, add items, close), persistence of the
settlement snapshot, status errors and manual hours correction.
"""

from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from shift_engines.aggregation import ShiftAdjustment
from shift_kernel.domain.dtos import ShiftStatus, StaffFinanceSettings
from shift_kernel.exceptions import (
    InvalidHoursError,
    ShiftAlreadyClosedError,
    ShiftAlreadyOpenError,
    ShiftNotClosedError,
    ShiftNotFoundError,
)
from shift_services.settlement_service import ShiftSettlementService

SHIFT_DATE = date(2026, 3, 2)


@pytest.fixture
def service(session, deterministic_clock, settlement_policy):
    return ShiftSettlementService(session, deterministic_clock, settlement_policy)


@pytest.fixture
def open_shift(service):
    return service.open_shift(uuid4(), uuid4(), SHIFT_DATE)


class TestOpenShift:
    """Opening shifts."""

    def test_open_shift(self, service, deterministic_clock):
        staff_id = uuid4()
        shift = service.open_shift(staff_id, uuid4(), SHIFT_DATE)

        assert shift.id is not None
        assert shift.status == ShiftStatus.OPEN
        assert shift.is_open
        assert shift.opened_at == deterministic_clock.now()
        assert service.find_shift(staff_id, SHIFT_DATE) is shift

    def test_one_shift_per_staff_and_date(self, service):
        staff_id = uuid4()
        service.open_shift(staff_id, uuid4(), SHIFT_DATE)

        with pytest.raises(ShiftAlreadyOpenError) as exc_info:
            service.open_shift(staff_id, uuid4(), SHIFT_DATE)
        assert exc_info.value.code == "SHIFT_ALREADY_OPEN"

    def test_same_staff_next_day(self, service):
        staff_id = uuid4()
        service.open_shift(staff_id, uuid4(), SHIFT_DATE)
        second = service.open_shift(staff_id, uuid4(), date(2026, 3, 3))
        assert second.is_open

    def test_opened_event_logged(self, service, captured_logs):
        shift = service.open_shift(uuid4(), uuid4(), SHIFT_DATE)
        opened = [r for r in captured_logs() if r["message"] == "shift_opened"]
        assert opened[0]["shift_id"] == str(shift.id)


class TestAddItem:
    """Recording client transactions."""

    def test_add_item(self, service, open_shift):
        item = service.add_item(
            open_shift.id,
            service_amount="1500",
            consumables_amount=Decimal("120.50"),
            client_name="Aida",
            service_name="Haircut",
        )

        assert item.shift_id == open_shift.id
        assert item.service_amount == Decimal("1500")
        assert item.consumables_amount == Decimal("120.50")
        assert len(open_shift.items) == 1

    def test_invalid_amount_stored_as_zero(self, service, open_shift):
        item = service.add_item(open_shift.id, service_amount="n/a")
        assert item.service_amount == Decimal("0")

    def test_unknown_shift(self, service):
        with pytest.raises(ShiftNotFoundError):
            service.add_item(uuid4(), service_amount=100)

    def test_closed_shift_rejects_items(self, service, open_shift):
        service.close_shift(open_shift.id, StaffFinanceSettings(60, 40))
        with pytest.raises(ShiftAlreadyClosedError):
            service.add_item(open_shift.id, service_amount=100)


class TestCloseShift:
    """Closing and settling shifts."""

    def test_close_from_items(self, service, open_shift, deterministic_clock):
        service.add_item(open_shift.id, service_amount=6000, consumables_amount=300)
        service.add_item(open_shift.id, service_amount=4000, consumables_amount=200)
        service.add_item(open_shift.id, service_amount=-900)
        deterministic_clock.advance_hours(8)

        shift = service.close_shift(open_shift.id, StaffFinanceSettings(60, 40))

        assert shift.status == ShiftStatus.CLOSED
        assert shift.closed_at == deterministic_clock.now()
        assert shift.total_amount == Decimal("10000")
        assert shift.consumables_amount == Decimal("500")
        assert shift.master_share == Decimal("6000.00")
        assert shift.salon_share == Decimal("4500.00")
        assert shift.topup_amount == Decimal("0")
        assert shift.hours_worked is None
        assert shift.payment_mode == "percent_with_guarantee"

    def test_close_with_guarantee(self, service, open_shift, deterministic_clock):
        deterministic_clock.advance_hours(8)

        shift = service.close_shift(
            open_shift.id,
            StaffFinanceSettings(60, 40, 1000),
            total_amount_raw=10000,
            consumables_amount_raw=500,
        )

        assert shift.hours_worked == Decimal("8.00")
        assert shift.hourly_rate == Decimal("1000")
        assert shift.guaranteed_amount == Decimal("8000.00")
        assert shift.topup_amount == Decimal("2000.00")
        assert shift.master_share == Decimal("8000.00")
        assert shift.salon_share == Decimal("2500.00")

    def test_normalized_percents_stored(self, service, open_shift):
        shift = service.close_shift(
            open_shift.id,
            StaffFinanceSettings(30, 20),
            total_amount_raw=1000,
        )
        assert shift.percent_master == Decimal("60")
        assert shift.percent_salon == Decimal("40")

    def test_policy_defaults_used_for_missing_percents(
        self, session, deterministic_clock, settlement_policy
    ):
        policy = replace(
            settlement_policy,
            default_percent_master=Decimal("50"),
            default_percent_salon=Decimal("50"),
        )
        service = ShiftSettlementService(session, deterministic_clock, policy)
        shift = service.open_shift(uuid4(), uuid4(), SHIFT_DATE)

        closed = service.close_shift(shift.id, StaffFinanceSettings(), total_amount_raw=1000)
        assert closed.master_share == Decimal("500.00")
        assert closed.salon_share == Decimal("500.00")

    def test_adjustments(self, service, open_shift):
        service.add_item(open_shift.id, service_amount=10000)
        shift = service.close_shift(
            open_shift.id,
            StaffFinanceSettings(60, 40),
            adjustments=[ShiftAdjustment(service_delta=-5000, reason="refund")],
        )
        assert shift.total_amount == Decimal("5000")
        assert shift.master_share == Decimal("3000.00")

    def test_percent_only_mode(self, service, open_shift, deterministic_clock):
        deterministic_clock.advance_hours(8)
        shift = service.close_shift(
            open_shift.id,
            StaffFinanceSettings(60, 40, 1000),
            total_amount_raw=1000,
            payment_mode="percent_only",
        )
        assert shift.payment_mode == "percent_only"
        assert shift.topup_amount == Decimal("0")
        assert shift.master_share == Decimal("600.00")

    def test_close_twice(self, service, open_shift):
        service.close_shift(open_shift.id, StaffFinanceSettings(60, 40))
        with pytest.raises(ShiftAlreadyClosedError) as exc_info:
            service.close_shift(open_shift.id, StaffFinanceSettings(60, 40))
        assert exc_info.value.code == "SHIFT_ALREADY_CLOSED"

    def test_close_unknown_shift(self, service):
        with pytest.raises(ShiftNotFoundError):
            service.close_shift(uuid4(), StaffFinanceSettings(60, 40))

    def test_closed_event_carries_shift_context(self, service, open_shift, captured_logs):
        service.close_shift(open_shift.id, StaffFinanceSettings(60, 40), total_amount_raw=100)
        closed = [r for r in captured_logs() if r["message"] == "shift_closed"]
        assert len(closed) == 1
        assert closed[0]["shift_id"] == str(open_shift.id)
        assert closed[0]["policy_id"] == "test"
        assert closed[0]["final_master_share"] == "60.00"


class TestRecalculateHours:
    """Manual hours correction on closed shifts."""

    @pytest.fixture
    def closed_shift(self, service, open_shift, deterministic_clock):
        deterministic_clock.advance_hours(8)
        return service.close_shift(
            open_shift.id,
            StaffFinanceSettings(60, 40, 1000),
            total_amount_raw=10000,
            consumables_amount_raw=500,
        )

    def test_lower_hours_removes_topup(self, service, closed_shift):
        shift = service.recalculate_hours(closed_shift.id, 4)

        assert shift.hours_worked == Decimal("4.00")
        assert shift.guaranteed_amount == Decimal("4000.00")
        assert shift.topup_amount == Decimal("0")
        assert shift.master_share == Decimal("6000.00")
        assert shift.salon_share == Decimal("4500.00")

    def test_higher_hours_increase_topup(self, service, closed_shift):
        shift = service.recalculate_hours(closed_shift.id, "10")

        assert shift.topup_amount == Decimal("4000.00")
        assert shift.master_share == Decimal("10000.00")
        assert shift.salon_share == Decimal("500.00")

    def test_totals_unchanged(self, service, closed_shift):
        shift = service.recalculate_hours(closed_shift.id, 2)
        assert shift.total_amount == Decimal("10000")
        assert shift.consumables_amount == Decimal("500")
        assert shift.status == ShiftStatus.CLOSED

    @pytest.mark.parametrize("hours", [-1, 49, "abc", None])
    def test_invalid_hours(self, service, closed_shift, hours):
        with pytest.raises(InvalidHoursError):
            service.recalculate_hours(closed_shift.id, hours)
        assert closed_shift.hours_worked == Decimal("8.00")

    def test_open_shift_rejected(self, service, open_shift):
        with pytest.raises(ShiftNotClosedError) as exc_info:
            service.recalculate_hours(open_shift.id, 4)
        assert exc_info.value.status == "open"

    def test_unknown_shift(self, service):
        with pytest.raises(ShiftNotFoundError):
            service.recalculate_hours(uuid4(), 4)

    def test_recalculated_event(self, service, closed_shift, captured_logs):
        service.recalculate_hours(closed_shift.id, 4)
        events = [r for r in captured_logs() if r["message"] == "shift_hours_recalculated"]
        assert events[0]["previous_hours"] == "8.00"
        assert events[0]["hours_worked"] == "4.00"
