"""Pure domain helpers for the shift kernel: clock, numeric coercion, DTOs."""

from shift_kernel.domain.clock import Clock, DeterministicClock, SystemClock
from shift_kernel.domain.dtos import ShiftSnapshot, ShiftStatus, StaffFinanceSettings
from shift_kernel.domain.numeric import (
    HUNDRED,
    ZERO,
    NumericInput,
    non_negative_or_zero,
    round_cents,
    round_units,
    signed_or_zero,
    to_decimal,
)

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
    "ShiftSnapshot",
    "ShiftStatus",
    "StaffFinanceSettings",
    "HUNDRED",
    "ZERO",
    "NumericInput",
    "non_negative_or_zero",
    "round_cents",
    "round_units",
    "signed_or_zero",
    "to_decimal",
]
