"""
Typed Exception Hierarchy for the Shift Settlement Kernel.

===============================================================================
SCOPE
===============================================================================

The calculation engines (``shift_engines``) are total: they coerce invalid
numeric input to safe defaults and never raise.  The exceptions below are
raised by the layers that wrap the engines -- the settlement service, hours
correction validation, and configuration loading.

Every exception:
  1. Is a TYPED class (catch by type, not message)
  2. Has a CODE class attribute (machine-readable, API-safe)
  3. Carries structured DATA as instance attributes

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    ShiftKernelError (base)
    |
    +-- ShiftError
    |   +-- ShiftNotFoundError
    |   +-- ShiftAlreadyOpenError
    |   +-- ShiftAlreadyClosedError
    |   +-- ShiftNotClosedError
    |
    +-- ValidationError
    |   +-- InvalidHoursError
    |
    +-- ConfigurationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Shift           | SHIFT_NOT_FOUND             | Shift ID doesn't exist
                | SHIFT_ALREADY_OPEN          | Staff already has a shift for the date
                | SHIFT_ALREADY_CLOSED        | Close/add item on a closed shift
                | SHIFT_NOT_CLOSED            | Hours correction on an open shift
----------------|-----------------------------|-----------------------------------------
Validation      | INVALID_HOURS_VALUE         | Corrected hours not finite or out of range
----------------|-----------------------------|-----------------------------------------
Configuration   | CONFIG_INVALID              | Settlement policy file has bad values

===============================================================================
HANDLING PATTERNS
===============================================================================

    try:
        service.close_shift(shift_id, settings)
    except ShiftAlreadyClosedError as e:
        return {"error": e.code, "shift_id": str(e.shift_id)}
"""


class ShiftKernelError(Exception):
    """
    Base exception for all shift kernel errors.

    All subclasses have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "SHIFT_KERNEL_ERROR"


# Shift lifecycle exceptions


class ShiftError(ShiftKernelError):
    """Base exception for shift lifecycle errors."""

    code: str = "SHIFT_ERROR"


class ShiftNotFoundError(ShiftError):
    """Shift with given ID was not found."""

    code: str = "SHIFT_NOT_FOUND"

    def __init__(self, shift_id: str):
        self.shift_id = str(shift_id)
        super().__init__(f"Shift not found: {shift_id}")


class ShiftAlreadyOpenError(ShiftError):
    """A shift already exists for this staff member and date."""

    code: str = "SHIFT_ALREADY_OPEN"

    def __init__(self, staff_id: str, shift_date: str):
        self.staff_id = str(staff_id)
        self.shift_date = str(shift_date)
        super().__init__(
            f"Shift already exists for staff {staff_id} on {shift_date}"
        )


class ShiftAlreadyClosedError(ShiftError):
    """Shift is closed; its items and totals can no longer change."""

    code: str = "SHIFT_ALREADY_CLOSED"

    def __init__(self, shift_id: str):
        self.shift_id = str(shift_id)
        super().__init__(f"Shift {shift_id} is already closed")


class ShiftNotClosedError(ShiftError):
    """Operation requires a closed shift."""

    code: str = "SHIFT_NOT_CLOSED"

    def __init__(self, shift_id: str, status: str):
        self.shift_id = str(shift_id)
        self.status = status
        super().__init__(
            f"Only closed shifts can be adjusted; shift {shift_id} is {status}"
        )


# Validation exceptions


class ValidationError(ShiftKernelError):
    """Base exception for request-level validation errors."""

    code: str = "VALIDATION_ERROR"


class InvalidHoursError(ValidationError):
    """Corrected hours value is not finite, negative, or above the limit."""

    code: str = "INVALID_HOURS_VALUE"

    def __init__(self, value: object, max_hours: object):
        self.value = str(value)
        self.max_hours = str(max_hours)
        super().__init__(
            f"Invalid hours value {value!r}: must be between 0 and {max_hours}"
        )


# Configuration exceptions


class ConfigurationError(ShiftKernelError):
    """Settlement policy configuration is invalid."""

    code: str = "CONFIG_INVALID"

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Invalid settlement policy field '{field}': {reason}")
