"""Unit tests for the read-window clamp policy."""

from __future__ import annotations

from decimal import Decimal
from fractions import Fraction

import pytest

from daylog.eventlog.limits import clamp_limit


class TestClampLimit:
    def test_zero_becomes_one(self) -> None:
        assert clamp_limit(0) == 1

    def test_negative_becomes_one(self) -> None:
        assert clamp_limit(-25) == 1

    def test_huge_becomes_max(self) -> None:
        assert clamp_limit(999_999_999) == 10000

    def test_huge_int_beyond_float_range(self) -> None:
        assert clamp_limit(10**400) == 10000

    def test_in_range_unchanged(self) -> None:
        assert clamp_limit(500) == 500

    def test_bounds_inclusive(self) -> None:
        assert clamp_limit(1) == 1
        assert clamp_limit(10000) == 10000

    def test_float_truncated(self) -> None:
        assert clamp_limit(2.9) == 2

    def test_fraction_truncated(self) -> None:
        assert clamp_limit(Fraction(7, 2)) == 3

    @pytest.mark.parametrize("value", [float("inf"), float("-inf"), float("nan")])
    def test_non_finite_float_defaults(self, value: float) -> None:
        assert clamp_limit(value) == 1000

    @pytest.mark.parametrize("value", ["not-a-number", "", None, object(), [], True])
    def test_non_numeric_defaults(self, value: object) -> None:
        assert clamp_limit(value) == 1000

    def test_numeric_string_accepted(self) -> None:
        assert clamp_limit("50") == 50
        assert clamp_limit(" 42 ") == 42
        assert clamp_limit("2.9") == 2
        assert clamp_limit("1e3") == 1000

    def test_infinite_string_defaults(self) -> None:
        assert clamp_limit("Infinity") == 1000
        assert clamp_limit("-inf") == 1000

    def test_decimal(self) -> None:
        assert clamp_limit(Decimal("12.7")) == 12
        assert clamp_limit(Decimal("Infinity")) == 1000

    def test_bytes(self) -> None:
        assert clamp_limit(b"75") == 75

    def test_custom_range(self) -> None:
        assert clamp_limit(0, default=5, lower=2, upper=9) == 2
        assert clamp_limit("x", default=5, lower=2, upper=9) == 5

    def test_huge_exponent_strings_clamped_without_expansion(self) -> None:
        assert clamp_limit("1e999999999") == 10000
        assert clamp_limit("-1e999999999") == 1
        assert clamp_limit(Decimal("9e999999999")) == 10000

    def test_huge_fraction(self) -> None:
        assert clamp_limit(Fraction(10**400, 3)) == 10000
