#!/usr/bin/env python3
"""
Print the settlement breakdown of a single shift.

Runs the pure settlement engine on numbers given on the command line;
nothing is read from or written to a database.

Usage:
    python3 scripts/settle_shift.py --total 10000 --consumables 500
    python3 scripts/settle_shift.py --total 1000 --hours 8 --rate 1000
    python3 scripts/settle_shift.py --total 1000 --hours 8 --rate 1000 --mode percent_only
    python3 scripts/settle_shift.py --total 10000 --json
"""

import argparse
import json
import logging
import sys
from decimal import Decimal
from pathlib import Path

# ---------------------------------------------------------------------------
# Project root on sys.path
# ---------------------------------------------------------------------------
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))

from shift_config import get_settlement_policy  # noqa: E402
from shift_engines.settlement import PaymentMode, calculate_shift_financials  # noqa: E402
from shift_kernel.logging_config import configure_logging  # noqa: E402


def fmt_amount(v) -> str:
    """Format amount for display (e.g. 1,234.50)."""
    d = Decimal(str(v))
    return f"{d:,.2f}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Settle one staff shift.")
    parser.add_argument("--total", default="0", help="Gross service revenue")
    parser.add_argument("--consumables", default="0", help="Consumables cost")
    parser.add_argument("--percent-master", default=None, help="Staff percentage")
    parser.add_argument("--percent-salon", default=None, help="Business percentage")
    parser.add_argument("--hours", default=None, help="Hours worked")
    parser.add_argument("--rate", default=None, help="Guaranteed hourly rate")
    parser.add_argument(
        "--mode",
        default=None,
        choices=[m.value for m in PaymentMode],
        help="Payment mode (default from the settlement policy)",
    )
    parser.add_argument("--policy", default=None, help="Settlement policy YAML file")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of a table")
    parser.add_argument("--verbose", action="store_true", help="Emit structured logs to stderr")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(level=logging.INFO if args.verbose else logging.WARNING)

    policy = get_settlement_policy(args.policy)
    result = calculate_shift_financials(
        total_amount=args.total,
        total_consumables=args.consumables,
        percent_master=args.percent_master if args.percent_master is not None else policy.default_percent_master,
        percent_salon=args.percent_salon if args.percent_salon is not None else policy.default_percent_salon,
        hours_worked=args.hours,
        hourly_rate=args.rate,
        payment_mode=args.mode or policy.default_payment_mode,
    )

    if args.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    rows = [
        ("Revenue", result.total_amount),
        ("Consumables", result.total_consumables),
        ("Split (staff / business %)", f"{result.normalized_percent_master:.2f} / {result.normalized_percent_salon:.2f}"),
        ("Base staff share", result.base_master_share),
        ("Base business share", result.base_salon_share),
        ("Guaranteed amount", result.guaranteed_amount),
        ("Top-up", result.topup_amount),
        ("Final staff share", result.final_master_share),
        ("Final business share", result.final_salon_share),
    ]
    print(f"\n  Shift settlement ({result.payment_mode.value}, {policy.currency})")
    print("  " + "-" * 48)
    for label, value in rows:
        shown = value if isinstance(value, str) else fmt_amount(value)
        print(f"  {label:<28} {shown:>18}")
    if result.uncovered_topup > 0:
        print(f"\n  WARNING: top-up exceeds business share by {fmt_amount(result.uncovered_topup)}")
    print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
