"""Treasury liquidity buckets."""

from __future__ import annotations

from dataclasses import dataclass

from tokenomics.errors import InsufficientLiquidity
from tokenomics.math.fixed_point import to_amount


@dataclass
class LiquidityBucket:
    """A named share of the treasury's LP position.

    ``lp_tokens`` is an ownership share of the pool, not a reserve amount;
    what a bucket is worth follows the pool. ``contributed_native`` and
    ``contributed_foreign`` record cost basis only and never feed a payout.
    """

    id: str
    lp_tokens: int = 0
    contributed_native: int = 0
    contributed_foreign: int = 0

    def credit(self, lp_tokens: int, native: int = 0, foreign: int = 0) -> None:
        self.lp_tokens = to_amount(self.lp_tokens + lp_tokens)
        self.contributed_native = to_amount(self.contributed_native + native)
        self.contributed_foreign = to_amount(self.contributed_foreign + foreign)

    def debit(self, lp_tokens: int) -> None:
        if lp_tokens > self.lp_tokens:
            raise InsufficientLiquidity(
                f"Bucket {self.id} holds {self.lp_tokens} LP, cannot release {lp_tokens}"
            )
        self.lp_tokens -= lp_tokens
