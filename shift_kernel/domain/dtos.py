"""
DTOs -- Value objects exchanged between the settlement service and the
pure shift engines.

Architecture position:
    Kernel > Domain -- pure, zero I/O.  Engines consume these instead of
    ORM rows so they never depend on the persistence layer.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from uuid import UUID

from shift_kernel.domain.numeric import NumericInput


class ShiftStatus(str, Enum):
    """Lifecycle status of a staff shift.  Transitions are OPEN -> CLOSED."""

    OPEN = "open"
    CLOSED = "closed"


@dataclass(frozen=True)
class StaffFinanceSettings:
    """
    Per-staff compensation configuration read at settlement time.

    ``percent_master``/``percent_salon`` need not sum to 100; the
    settlement normalizes them.  A missing or non-positive
    ``hourly_rate`` disables the guaranteed minimum.
    """

    percent_master: NumericInput = None
    percent_salon: NumericInput = None
    hourly_rate: NumericInput = None


@dataclass(frozen=True)
class ShiftSnapshot:
    """Minimal view of a shift needed to decide whether it can be closed."""

    shift_id: UUID | str
    staff_id: UUID | str
    shift_date: date
    status: ShiftStatus
    opened_at: datetime | None = None

    @property
    def is_closed(self) -> bool:
        return self.status == ShiftStatus.CLOSED
