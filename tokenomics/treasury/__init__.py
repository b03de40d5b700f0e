"""Treasury-owned liquidity: buckets, zap and LP distribution."""

from tokenomics.treasury.allocator import (
    AllocationOutcome,
    AllocatorState,
    TreasuryAllocator,
    UnwindOutcome,
)
from tokenomics.treasury.buckets import LiquidityBucket
from tokenomics.treasury.distribution import largest_remainder
from tokenomics.treasury.zap import Zap, ZapResult, optimal_swap_amount

__all__ = [
    "AllocationOutcome",
    "AllocatorState",
    "LiquidityBucket",
    "TreasuryAllocator",
    "UnwindOutcome",
    "Zap",
    "ZapResult",
    "largest_remainder",
    "optimal_swap_amount",
]
