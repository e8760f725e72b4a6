"""Tests for lenient Decimal coercion and currency rounding."""

from decimal import Decimal

import pytest

from shift_kernel.domain.numeric import (
    non_negative_or_zero,
    round_cents,
    round_units,
    signed_or_zero,
    to_decimal,
)


class TestToDecimal:
    """Invalid input becomes None instead of raising."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (10, Decimal("10")),
            ("  12.50 ", Decimal("12.50")),
            (0.1, Decimal("0.1")),
            (Decimal("-3"), Decimal("-3")),
            (1.7976931348623157e308, Decimal("1.7976931348623157e308")),
        ],
    )
    def test_valid(self, value, expected):
        assert to_decimal(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, True, "abc", "", float("nan"), float("inf"), Decimal("-Infinity"), "1e400", 10**400],
    )
    def test_invalid(self, value):
        assert to_decimal(value) is None

    def test_clamping_helpers(self):
        assert non_negative_or_zero("-5") == Decimal("0")
        assert non_negative_or_zero("nan") == Decimal("0")
        assert signed_or_zero("-5") == Decimal("-5")
        assert signed_or_zero(None) == Decimal("0")


class TestRounding:
    """Halves round toward +infinity at both precisions."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2.5", "3"),
            ("-2.5", "-2"),
            ("-2.51", "-3"),
            ("-0.5", "0"),
            ("1.4", "1"),
            ("-1.4", "-1"),
        ],
    )
    def test_units(self, value, expected):
        assert round_units(Decimal(value)) == Decimal(expected)

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("1.005", "1.01"),
            ("-1.005", "-1.00"),
            ("-1.006", "-1.01"),
            ("0.004", "0.00"),
        ],
    )
    def test_cents(self, value, expected):
        assert round_cents(Decimal(value)) == Decimal(expected)

    def test_beyond_default_precision(self):
        value = Decimal("123456789012345678901234567890.125")
        assert round_cents(value) == Decimal("123456789012345678901234567890.13")
        assert round_units(value) == Decimal("123456789012345678901234567890")

    def test_largest_double(self):
        value = Decimal(1.7976931348623157e308)
        assert round_units(value) == value
        assert round_cents(value) == value
