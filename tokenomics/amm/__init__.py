"""Automated market maker: the native/foreign constant-product pool."""

from tokenomics.amm.base import (
    LiquidityResult,
    LiquidityVenue,
    SwapDirection,
    SwapResult,
    SwapVenue,
)
from tokenomics.amm.constant_product import ConstantProductPool, PoolState

__all__ = [
    # Base types
    "LiquidityResult",
    "LiquidityVenue",
    "SwapDirection",
    "SwapResult",
    "SwapVenue",
    # Pool
    "ConstantProductPool",
    "PoolState",
]
