"""Checked integer wrapper for fixed-point amounts.

SafeInt makes scaled-integer arithmetic fail loudly instead of producing a
value outside the engine's integer model:
- Division by zero raises DivisionByZero
- Subtraction below zero raises Underflow
- Any sum or product beyond the 256-bit intermediate width raises Overflow
- to_amount() rejects values outside the 128-bit storage width

Usage pattern:
    from tokenomics.safe_int import S

    def quote(amount_in: int, reserve_in: int, reserve_out: int) -> int:
        numerator = S(reserve_out) * S(amount_in)
        denominator = S(reserve_in) + S(amount_in)
        return (numerator // denominator).to_amount()
"""

from __future__ import annotations

from tokenomics.constants import AMOUNT_MAX, WIDE_MAX
from tokenomics.errors import Overflow


class SafeIntError(ArithmeticError):
    """Base class for SafeInt arithmetic misuse."""

    pass


class DivisionByZero(SafeIntError):
    """Division by zero."""

    pass


class Underflow(SafeIntError):
    """Subtraction would produce a negative result."""

    pass


def _check_wide(value: int) -> int:
    if value > WIDE_MAX or value < -WIDE_MAX:
        raise Overflow(f"Intermediate value exceeds 256-bit width: {value}")
    return value


class SafeInt:
    """Integer with checked arithmetic.

    Results of ``+`` and ``*`` are bounded by the 256-bit intermediate width,
    so a product of two stored amounts always fits while anything larger is
    reported as Overflow rather than carried along silently.

    Attributes:
        value: The underlying integer value (read-only)
    """

    __slots__ = ("_value",)
    _value: int

    def __init__(self, value: int | SafeInt) -> None:
        """Create a SafeInt from an integer or another SafeInt.

        Raises:
            TypeError: If value is not an int or SafeInt (bool is rejected)
        """
        if isinstance(value, SafeInt):
            self._value = value._value
        elif isinstance(value, int) and not isinstance(value, bool):
            self._value = _check_wide(value)
        else:
            raise TypeError(f"SafeInt requires int, got {type(value).__name__}")

    @property
    def value(self) -> int:
        """The underlying integer value."""
        return self._value

    def __repr__(self) -> str:
        return f"SafeInt({self._value})"

    def __str__(self) -> str:
        return str(self._value)

    def __hash__(self) -> int:
        return hash(self._value)

    # --- Arithmetic operations ---

    def __add__(self, other: SafeInt | int) -> SafeInt:
        return SafeInt(_check_wide(self._value + _extract_value(other)))

    def __radd__(self, other: int) -> SafeInt:
        return SafeInt(_check_wide(other + self._value))

    def __sub__(self, other: SafeInt | int) -> SafeInt:
        """Subtract other from self.

        Raises:
            Underflow: If result would be negative
        """
        other_val = _extract_value(other)
        result = self._value - other_val
        if result < 0:
            raise Underflow(f"Underflow: {self._value} - {other_val} = {result}")
        return SafeInt(result)

    def __rsub__(self, other: int) -> SafeInt:
        result = other - self._value
        if result < 0:
            raise Underflow(f"Underflow: {other} - {self._value} = {result}")
        return SafeInt(result)

    def __mul__(self, other: SafeInt | int) -> SafeInt:
        """Multiply two values.

        Raises:
            Overflow: If the product exceeds the 256-bit intermediate width
        """
        return SafeInt(_check_wide(self._value * _extract_value(other)))

    def __rmul__(self, other: int) -> SafeInt:
        return SafeInt(_check_wide(other * self._value))

    def __floordiv__(self, other: SafeInt | int) -> SafeInt:
        """Integer division, rounding toward negative infinity.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Division by zero: {self._value} // 0")
        return SafeInt(self._value // other_val)

    # --- Comparison operations ---

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SafeInt):
            return self._value == other._value
        if isinstance(other, int):
            return self._value == other
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return NotImplemented
        return not result

    def __lt__(self, other: SafeInt | int) -> bool:
        return self._value < _extract_value(other)

    def __le__(self, other: SafeInt | int) -> bool:
        return self._value <= _extract_value(other)

    def __gt__(self, other: SafeInt | int) -> bool:
        return self._value > _extract_value(other)

    def __ge__(self, other: SafeInt | int) -> bool:
        return self._value >= _extract_value(other)

    # --- Conversion ---

    def __int__(self) -> int:
        return self._value

    def __bool__(self) -> bool:
        return self._value != 0

    def __index__(self) -> int:
        return self._value

    # --- Named operations ---

    def ceiling_div(self, other: SafeInt | int) -> SafeInt:
        """Ceiling division for non-negative operands.

        Raises:
            DivisionByZero: If other is zero
        """
        other_val = _extract_value(other)
        if other_val == 0:
            raise DivisionByZero(f"Ceiling division by zero: {self._value}")
        return SafeInt(-((-self._value) // other_val))

    def to_amount(self) -> int:
        """Convert to int, validating the 128-bit storage bounds.

        Raises:
            Overflow: If value is negative or exceeds 2^128-1
        """
        if self._value < 0:
            raise Overflow(f"Negative value cannot be stored as an amount: {self._value}")
        if self._value > AMOUNT_MAX:
            raise Overflow(f"Value exceeds amount max: {self._value}")
        return self._value


def _extract_value(x: SafeInt | int) -> int:
    """Extract integer value from SafeInt or int."""
    if isinstance(x, SafeInt):
        return x._value
    return x


# Convenience alias for concise code
S = SafeInt
