"""
Module: shift_engines
Responsibility:
    Package entrypoint that re-exports the public symbols of the pure
    shift calculation engines.  This is the canonical import surface for
    the settlement service and scripts.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import shift_kernel/domain, shift_kernel/logging_config,
    shift_kernel/exceptions and sibling engine modules.

Invariants enforced:
    - Purity: engines NEVER call ``datetime.now()``.  Timestamps are
      passed in as explicit parameters.
    - Decimal-only arithmetic: floats are coerced at the boundary.
    - Determinism: identical inputs always produce identical outputs.
    - Totality: invalid numbers degrade to safe defaults; the engines
      do not raise on bad numeric input.

Usage:
    from shift_engines import calculate_shift_financials, sum_service_amount
    from shift_engines.closing import close_shift
"""

from shift_engines.aggregation import (
    AdjustedTotals,
    ShiftAdjustment,
    ShiftLineItem,
    apply_adjustments,
    sum_consumables_amount,
    sum_service_amount,
)
from shift_engines.closing import (
    CloseShiftOutcome,
    CloseShiftOutcomeKind,
    close_shift,
)
from shift_engines.hours import (
    DEFAULT_MAX_CORRECTED_HOURS,
    calculate_hours_worked,
    normalize_corrected_hours,
)
from shift_engines.settlement import (
    DEFAULT_PERCENT_MASTER,
    DEFAULT_PERCENT_SALON,
    NormalizedSplit,
    PaymentMode,
    ShiftFinancialResult,
    calculate_guaranteed_amount,
    calculate_shift_financials,
    normalize_percentages,
)
from shift_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    # aggregation
    "AdjustedTotals",
    "ShiftAdjustment",
    "ShiftLineItem",
    "apply_adjustments",
    "sum_consumables_amount",
    "sum_service_amount",
    # closing
    "CloseShiftOutcome",
    "CloseShiftOutcomeKind",
    "close_shift",
    # hours
    "DEFAULT_MAX_CORRECTED_HOURS",
    "calculate_hours_worked",
    "normalize_corrected_hours",
    # settlement
    "DEFAULT_PERCENT_MASTER",
    "DEFAULT_PERCENT_SALON",
    "NormalizedSplit",
    "PaymentMode",
    "ShiftFinancialResult",
    "calculate_guaranteed_amount",
    "calculate_shift_financials",
    "normalize_percentages",
    # tracer
    "compute_input_fingerprint",
    "traced_engine",
]
