"""Tests for fixed-point primitives."""

import pytest

from tokenomics.constants import AMOUNT_MAX, PPM, PRECISION
from tokenomics.errors import Overflow
from tokenomics.math.fixed_point import (
    apply_ppm,
    div_ceil,
    isqrt,
    mul_div,
    mul_div_ceil,
    to_amount,
)
from tokenomics.safe_int import DivisionByZero


class TestMulDiv:
    """Tests for mul_div and its rounding variants."""

    def test_floor_rounding(self):
        """mul_div rounds down."""
        assert mul_div(10, 3, 4) == 7

    def test_ceil_rounding(self):
        """mul_div_ceil rounds up when there is a remainder."""
        assert mul_div_ceil(10, 3, 4) == 8
        assert mul_div_ceil(12, 3, 4) == 9

    def test_div_ceil(self):
        """div_ceil rounds up only inexact quotients."""
        assert div_ceil(7, 2) == 4
        assert div_ceil(8, 2) == 4

    def test_wide_intermediate(self):
        """Products beyond 128 bits are handled exactly."""
        assert mul_div(AMOUNT_MAX, AMOUNT_MAX, AMOUNT_MAX) == AMOUNT_MAX
        assert mul_div(2**127, 2**127, 2**127) == 2**127

    def test_intermediate_overflow_raises(self):
        """A product beyond 256 bits raises Overflow."""
        with pytest.raises(Overflow):
            mul_div(2**200, 2**100, 1)

    def test_division_by_zero_raises(self):
        """Zero divisor raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            mul_div(1, 1, 0)

    def test_apply_ppm(self):
        """0.5% of 1000 units is exactly 5 units."""
        assert apply_ppm(1000 * PRECISION, 5_000) == 5 * PRECISION
        assert apply_ppm(123, PPM) == 123


class TestIsqrt:
    """Tests for the integer square root."""

    @pytest.mark.parametrize(
        "n,expected",
        [(0, 0), (1, 1), (2, 1), (3, 1), (4, 2), (15, 3), (16, 4), (17, 4), (10**24, 10**12)],
    )
    def test_known_values(self, n, expected):
        """isqrt returns the floor root."""
        assert isqrt(n) == expected

    def test_floor_property(self):
        """r*r <= n < (r+1)^2 across a spread of magnitudes."""
        for n in [5, 99, 1000, 123456789, 10**30 + 7, 2**255 - 19]:
            r = isqrt(n)
            assert r * r <= n < (r + 1) * (r + 1)

    def test_max_amount_square(self):
        """The square of the largest amount roots back exactly."""
        assert isqrt(AMOUNT_MAX * AMOUNT_MAX) == AMOUNT_MAX

    def test_negative_raises(self):
        """Negative input is rejected."""
        with pytest.raises(ValueError):
            isqrt(-1)


class TestToAmount:
    """Tests for the storage-width check."""

    def test_bounds(self):
        """0 and 2^128-1 are valid amounts."""
        assert to_amount(0) == 0
        assert to_amount(AMOUNT_MAX) == AMOUNT_MAX

    def test_out_of_range_raises(self):
        """Values outside the amount range raise Overflow."""
        with pytest.raises(Overflow):
            to_amount(AMOUNT_MAX + 1)
        with pytest.raises(Overflow):
            to_amount(-1)
