"""
Configuration Schema (``shift_config.schema``).

Frozen dataclasses describing the settlement policy.  Parsed from YAML by
``shift_config.loader``; consumed by the settlement service.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal


@dataclass(frozen=True)
class SettlementPolicy:
    """
    Business-wide settlement defaults and limits.

    Fields:
        default_percent_master / default_percent_salon: split used when a
            staff record has no percentages.
        default_payment_mode: value of ``shift_engines.PaymentMode``.
        max_corrected_hours: upper bound for a manual hours correction.
        currency: display currency; the settlement itself is currency-agnostic.
    """

    policy_id: str
    version: int
    default_percent_master: Decimal = Decimal("60")
    default_percent_salon: Decimal = Decimal("40")
    default_payment_mode: str = "percent_with_guarantee"
    max_corrected_hours: Decimal = Decimal("48")
    currency: str = "KGS"
    checksum: str = ""
