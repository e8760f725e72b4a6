"""ORM models.  Importing this package registers every table on Base.metadata."""

from shift_kernel.models.staff_shift import StaffShift, StaffShiftItem

__all__ = [
    "StaffShift",
    "StaffShiftItem",
]
