"""Fixed-point math for the tokenomics engine.

This package provides the scaled-integer primitives every component uses:
- mul_div / mul_div_ceil / div_ceil: products at 256-bit width with explicit rounding
- isqrt: floor integer square root
"""

from tokenomics.math.fixed_point import (
    apply_ppm,
    div_ceil,
    isqrt,
    mul_div,
    mul_div_ceil,
    to_amount,
)

__all__ = ["apply_ppm", "div_ceil", "isqrt", "mul_div", "mul_div_ceil", "to_amount"]
