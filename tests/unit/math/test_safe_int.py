"""Tests for the SafeInt checked arithmetic wrapper."""

import pytest

from tokenomics.constants import AMOUNT_MAX, WIDE_MAX
from tokenomics.errors import Overflow
from tokenomics.safe_int import DivisionByZero, S, SafeInt, SafeIntError, Underflow


class TestSafeIntConstruction:
    """Tests for SafeInt construction."""

    def test_from_int(self):
        """SafeInt can be constructed from int."""
        assert SafeInt(42).value == 42

    def test_from_safeint(self):
        """SafeInt can be constructed from another SafeInt."""
        assert SafeInt(SafeInt(42)).value == 42

    def test_from_invalid_type_raises(self):
        """SafeInt rejects strings, floats and bools."""
        with pytest.raises(TypeError):
            SafeInt("42")  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(3.14)  # type: ignore
        with pytest.raises(TypeError):
            SafeInt(True)

    def test_beyond_wide_width_raises(self):
        """Values beyond the 256-bit intermediate width are rejected."""
        with pytest.raises(Overflow):
            SafeInt(WIDE_MAX + 1)

    def test_alias_s(self):
        """S is an alias for SafeInt."""
        assert S is SafeInt


class TestSafeIntArithmetic:
    """Tests for SafeInt arithmetic operations."""

    def test_add(self):
        """Addition works with SafeInt and int operands."""
        assert (S(10) + S(5)).value == 15
        assert (S(10) + 5).value == 15
        assert (5 + S(10)).value == 15

    def test_sub(self):
        """Subtraction works when the result is non-negative."""
        assert (S(10) - S(4)).value == 6
        assert (10 - S(4)).value == 6

    def test_sub_underflow_raises(self):
        """Subtraction below zero raises Underflow."""
        with pytest.raises(Underflow):
            S(4) - S(10)
        with pytest.raises(Underflow):
            4 - S(10)

    def test_mul(self):
        """Multiplication works with both operand orders."""
        assert (S(6) * S(7)).value == 42
        assert (6 * S(7)).value == 42

    def test_mul_at_wide_limit(self):
        """Product of two maximal amounts still fits the intermediate width."""
        assert (S(AMOUNT_MAX) * S(AMOUNT_MAX)).value == AMOUNT_MAX * AMOUNT_MAX

    def test_mul_overflow_raises(self):
        """Product beyond 256 bits raises Overflow instead of growing silently."""
        with pytest.raises(Overflow):
            S(2**200) * S(2**100)

    def test_add_overflow_raises(self):
        """Sum beyond 256 bits raises Overflow."""
        with pytest.raises(Overflow):
            S(WIDE_MAX) + 1

    def test_floordiv(self):
        """Floor division rounds down."""
        assert (S(10) // S(3)).value == 3

    def test_floordiv_by_zero_raises(self):
        """Division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            S(10) // 0

    def test_errors_are_arithmetic_errors(self):
        """SafeInt errors share a common ArithmeticError base."""
        assert issubclass(Underflow, SafeIntError)
        assert issubclass(DivisionByZero, ArithmeticError)
        assert issubclass(Overflow, ArithmeticError)


class TestSafeIntNamedOperations:
    """Tests for named helpers."""

    def test_ceiling_div(self):
        """Ceiling division rounds up only when there is a remainder."""
        assert S(10).ceiling_div(3).value == 4
        assert S(9).ceiling_div(3).value == 3
        assert S(0).ceiling_div(3).value == 0

    def test_ceiling_div_by_zero_raises(self):
        """Ceiling division by zero raises DivisionByZero."""
        with pytest.raises(DivisionByZero):
            S(10).ceiling_div(0)


class TestSafeIntConversion:
    """Tests for storage-width conversion."""

    def test_to_amount_in_range(self):
        """Values inside [0, 2^128-1] convert."""
        assert S(0).to_amount() == 0
        assert S(AMOUNT_MAX).to_amount() == AMOUNT_MAX

    def test_to_amount_too_large_raises(self):
        """Values above 2^128-1 raise Overflow."""
        with pytest.raises(Overflow):
            S(AMOUNT_MAX + 1).to_amount()

    def test_to_amount_negative_raises(self):
        """Negative values cannot be stored."""
        with pytest.raises(Overflow):
            S(-1).to_amount()

    def test_comparisons(self):
        """SafeInt compares against ints and SafeInts."""
        assert S(5) == 5
        assert S(5) == S(5)
        assert S(5) != 6
        assert S(5) < 6
        assert S(5) <= S(5)
        assert S(7) > 6
        assert S(7) >= 7
        assert bool(S(0)) is False
