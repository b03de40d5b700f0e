"""Scaled-integer arithmetic primitives.

All amounts are integers scaled by PRECISION (1e12) and all ratios integers
scaled by PPM (1e6). Products are formed at the 256-bit intermediate width
and every stored result is checked against the 128-bit amount width, so a
computation either produces an exact, floored (or explicitly ceiled) integer
or raises Overflow. Nothing here saturates or wraps.
"""

from __future__ import annotations

from tokenomics.constants import AMOUNT_MAX, PPM, PRECISION
from tokenomics.errors import Overflow
from tokenomics.safe_int import S, SafeInt

__all__ = [
    # Functions
    "mul_div",
    "mul_div_ceil",
    "div_ceil",
    "isqrt",
    "to_amount",
    "apply_ppm",
    # Constants
    "PRECISION",
    "PPM",
]


def to_amount(value: int) -> int:
    """Validate that ``value`` is storable as an amount.

    Raises:
        Overflow: If value is negative or exceeds 2^128-1
    """
    if value < 0 or value > AMOUNT_MAX:
        raise Overflow(f"Amount out of range: {value}")
    return value


def mul_div(a: int | SafeInt, b: int | SafeInt, c: int | SafeInt) -> int:
    """Compute floor(a * b / c) with a 256-bit intermediate product.

    Raises:
        Overflow: If a * b exceeds the intermediate width
        DivisionByZero: If c is zero
    """
    return ((S(a) * S(b)) // S(c)).value


def mul_div_ceil(a: int | SafeInt, b: int | SafeInt, c: int | SafeInt) -> int:
    """Compute ceil(a * b / c) for non-negative operands."""
    return (S(a) * S(b)).ceiling_div(S(c)).value


def div_ceil(a: int | SafeInt, b: int | SafeInt) -> int:
    """Compute ceil(a / b) for non-negative operands."""
    return S(a).ceiling_div(S(b)).value


def apply_ppm(amount: int, ratio_ppm: int) -> int:
    """Floored share of ``amount`` for a PPM-scaled ratio."""
    return mul_div(amount, ratio_ppm, PPM)


def isqrt(n: int | SafeInt) -> int:
    """Integer square root (floor) by Newton's method.

    The first guess is a power of two derived from the bit length, which is
    always at or above the true root, so the iteration decreases
    monotonically and stops at the floor.

    Raises:
        ValueError: If n is negative
    """
    value = int(n)
    if value < 0:
        raise ValueError(f"isqrt of negative value: {value}")
    if value < 2:
        return value

    x = 1 << ((value.bit_length() + 1) // 2)
    while True:
        y = (x + value // x) // 2
        if y >= x:
            return x
        x = y
