"""Treasury-owned liquidity (TOL) allocator.

Receives the treasury share of every mint, turns it into pool liquidity via
the zap and splits the minted LP across weighted buckets. Amounts that
cannot be deposited yet stay in a transient buffer and are retried on the
next allocation or by the deferred-work scheduler.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from dataclasses import dataclass, field

import structlog

from tokenomics.amm.base import LiquidityVenue
from tokenomics.constants import PPM
from tokenomics.errors import BucketLocked, InsufficientAmount, ValidationError
from tokenomics.math.fixed_point import mul_div, to_amount
from tokenomics.treasury.buckets import LiquidityBucket
from tokenomics.treasury.distribution import largest_remainder
from tokenomics.treasury.zap import Zap, ZapResult

logger = structlog.get_logger()


@dataclass(frozen=True)
class AllocationOutcome:
    """Aggregate effect of an allocation or buffer flush.

    Per-bucket detail is read from the buckets themselves.
    """

    lp_minted: int = 0
    native_add: int = 0
    foreign_add: int = 0
    foreign_swapped: int = 0
    native_from_swap: int = 0

    @property
    def deposited(self) -> bool:
        return self.lp_minted > 0


@dataclass(frozen=True)
class UnwindOutcome:
    """Result of releasing LP from a bucket."""

    bucket_id: str
    lp_burned: int
    native_out: int
    foreign_out: int


@dataclass
class AllocatorState:
    """Snapshot of mutable allocator state."""

    buckets: dict[str, LiquidityBucket] = field(default_factory=dict)
    buffer_native: int = 0
    buffer_foreign: int = 0
    bonus_units: dict[str, int] = field(default_factory=dict)
    total_native_deposited: int = 0
    total_foreign_deposited: int = 0
    total_foreign_swapped: int = 0


class TreasuryAllocator:
    """Owns the treasury buckets and the zap buffer.

    Args:
        pool: Venue receiving the liquidity
        bucket_weights: Bucket id to PPM weight, summing to PPM
        dust_threshold: Smallest foreign excess worth a rebalancing swap
    """

    def __init__(
        self,
        pool: LiquidityVenue,
        bucket_weights: Mapping[str, int],
        dust_threshold: int = 1,
    ) -> None:
        if not bucket_weights:
            raise ValidationError("At least one treasury bucket is required")
        self._pool = pool
        self._zap = Zap(pool, dust_threshold)
        self._bucket_ids = list(bucket_weights)
        self._weights = [bucket_weights[bucket_id] for bucket_id in self._bucket_ids]
        # validates the weights once, at construction
        largest_remainder(0, self._weights)
        self.primary_bucket_id = max(self._bucket_ids, key=lambda b: bucket_weights[b])
        self._state = AllocatorState(
            buckets={
                bucket_id: LiquidityBucket(id=bucket_id) for bucket_id in self._bucket_ids
            }
        )

    # --- Queries ---

    @property
    def buffer_native(self) -> int:
        return self._state.buffer_native

    @property
    def buffer_foreign(self) -> int:
        return self._state.buffer_foreign

    @property
    def total_native_deposited(self) -> int:
        return self._state.total_native_deposited

    @property
    def total_foreign_deposited(self) -> int:
        return self._state.total_foreign_deposited

    @property
    def total_foreign_swapped(self) -> int:
        return self._state.total_foreign_swapped

    @property
    def buckets(self) -> list[LiquidityBucket]:
        return [self._state.buckets[bucket_id] for bucket_id in self._bucket_ids]

    def bucket(self, bucket_id: str) -> LiquidityBucket:
        try:
            return self._state.buckets[bucket_id]
        except KeyError:
            raise ValidationError(f"Unknown treasury bucket: {bucket_id}") from None

    def weight_of(self, bucket_id: str) -> int:
        """Configured PPM weight of a bucket."""
        self.bucket(bucket_id)
        return self._weights[self._bucket_ids.index(bucket_id)]

    def total_lp(self) -> int:
        return sum(b.lp_tokens for b in self._state.buckets.values())

    def reserves_of(self, bucket_id: str) -> tuple[int, int]:
        """Native and foreign currently backing a bucket's LP share."""
        lp_tokens = self.bucket(bucket_id).lp_tokens
        supply = self._pool.supply_lp
        if lp_tokens == 0 or supply == 0:
            return 0, 0
        return (
            mul_div(self._pool.reserve_native, lp_tokens, supply),
            mul_div(self._pool.reserve_foreign, lp_tokens, supply),
        )

    def has_pending_work(self) -> bool:
        """True if the buffer could be (partly) deposited right now."""
        return self._zap.would_progress(self._state.buffer_native, self._state.buffer_foreign)

    # --- Operations ---

    def receive_mint_allocation(self, native_in: int, foreign_in: int) -> AllocationOutcome:
        """Buffer a mint's treasury share and zap the buffer into the pool."""
        if native_in < 0 or foreign_in < 0:
            raise InsufficientAmount(
                f"Allocation amounts cannot be negative: native={native_in} foreign={foreign_in}"
            )
        state = self._state
        state.buffer_native = to_amount(state.buffer_native + native_in)
        state.buffer_foreign = to_amount(state.buffer_foreign + foreign_in)
        return self.flush()

    def flush(self) -> AllocationOutcome:
        """Zap the current buffer, keeping whatever cannot be paired."""
        state = self._state
        result = self._zap.execute(state.buffer_native, state.buffer_foreign)
        state.buffer_native = result.native_left
        state.buffer_foreign = result.foreign_left

        if result.lp_minted > 0:
            self._distribute(result)
        elif state.buffer_native or state.buffer_foreign:
            logger.debug(
                "allocation_buffered",
                buffer_native=state.buffer_native,
                buffer_foreign=state.buffer_foreign,
            )

        state.total_native_deposited += result.native_add
        state.total_foreign_deposited += result.foreign_add
        state.total_foreign_swapped += result.foreign_swapped
        return AllocationOutcome(
            lp_minted=result.lp_minted,
            native_add=result.native_add,
            foreign_add=result.foreign_add,
            foreign_swapped=result.foreign_swapped,
            native_from_swap=result.native_from_swap,
        )

    def _distribute(self, result: ZapResult) -> None:
        state = self._state
        priority = [state.bonus_units.get(bucket_id, 0) for bucket_id in self._bucket_ids]
        lp_shares = largest_remainder(result.lp_minted, self._weights, priority)
        native_shares = largest_remainder(result.native_add, self._weights, priority)
        foreign_shares = largest_remainder(result.foreign_add, self._weights, priority)
        for i, bucket_id in enumerate(self._bucket_ids):
            state.buckets[bucket_id].credit(lp_shares[i], native_shares[i], foreign_shares[i])
            bonus = lp_shares[i] - mul_div(result.lp_minted, self._weights[i], PPM)
            if bonus:
                state.bonus_units[bucket_id] = priority[i] + bonus

    def unwind(self, bucket_id: str, lp_amount: int) -> UnwindOutcome:
        """Release ``lp_amount`` of a bucket's LP and withdraw the liquidity.

        Authorization is checked by the owner of the allocator.

        Raises:
            BucketLocked: If bucket_id is the primary bucket
            ValidationError: If the bucket does not exist
            InsufficientAmount: If lp_amount is non-positive
            InsufficientLiquidity: If the bucket holds fewer LP tokens
        """
        if bucket_id == self.primary_bucket_id:
            raise BucketLocked(f"Primary bucket {bucket_id} can never be unwound")
        bucket = self.bucket(bucket_id)
        if lp_amount <= 0:
            raise InsufficientAmount(f"Unwind amount must be positive, got {lp_amount}")

        bucket.debit(lp_amount)
        withdrawal = self._pool.remove_liquidity(lp_amount)
        logger.info(
            "bucket_unwound",
            bucket_id=bucket_id,
            lp_burned=lp_amount,
            native_out=withdrawal.native,
            foreign_out=withdrawal.foreign,
        )
        return UnwindOutcome(
            bucket_id=bucket_id,
            lp_burned=lp_amount,
            native_out=withdrawal.native,
            foreign_out=withdrawal.foreign,
        )

    # --- Snapshots ---

    def snapshot(self) -> AllocatorState:
        return copy.deepcopy(self._state)

    def restore(self, state: AllocatorState) -> None:
        self._state = copy.deepcopy(state)
