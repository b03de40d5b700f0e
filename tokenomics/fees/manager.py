"""Router fee accounting: buffer, convert, burn.

Native fees are burned as soon as they arrive. Foreign fees accumulate
until the buffer reaches ``min_swap_foreign``; the buffer is then sold into
the pool for native, which is burned. A conversion whose quote falls more
than ``slippage_tolerance_ppm`` short of the spot-implied output is held
back and retried later.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass

import structlog

from tokenomics.amm.base import SwapVenue
from tokenomics.constants import DEFAULT_SLIPPAGE_TOLERANCE_PPM, PPM, PRECISION
from tokenomics.curve.base import BurnOutcome, SupplyBurner
from tokenomics.errors import InsufficientAmount, ValidationError
from tokenomics.fees.result import ConversionOutcome, ConversionStatus
from tokenomics.math.fixed_point import mul_div, to_amount

logger = structlog.get_logger()


@dataclass
class FeeManagerState:
    """Snapshot of mutable fee manager state."""

    buffer_native: int = 0
    buffer_foreign: int = 0
    total_native_burned: int = 0
    total_foreign_converted: int = 0
    conversions_deferred: int = 0


class FeeManager:
    """Buffers router fees and burns their native value.

    Args:
        pool: Venue used to convert foreign fees
        burner: Destroys native supply
        min_swap_foreign: Smallest foreign buffer worth converting
        slippage_tolerance_ppm: Largest accepted shortfall of the quote
            against the spot-implied output
    """

    def __init__(
        self,
        pool: SwapVenue,
        burner: SupplyBurner,
        min_swap_foreign: int,
        slippage_tolerance_ppm: int = DEFAULT_SLIPPAGE_TOLERANCE_PPM,
    ) -> None:
        if not 0 <= slippage_tolerance_ppm < PPM:
            raise ValidationError(
                f"Slippage tolerance must be in [0, {PPM}), got {slippage_tolerance_ppm}"
            )
        self._pool = pool
        self._burner = burner
        self.min_swap_foreign = min_swap_foreign
        self.slippage_tolerance_ppm = slippage_tolerance_ppm
        self._state = FeeManagerState()

    @property
    def buffer_native(self) -> int:
        return self._state.buffer_native

    @property
    def buffer_foreign(self) -> int:
        return self._state.buffer_foreign

    @property
    def total_native_burned(self) -> int:
        return self._state.total_native_burned

    @property
    def total_foreign_converted(self) -> int:
        return self._state.total_foreign_converted

    @property
    def conversions_deferred(self) -> int:
        return self._state.conversions_deferred

    def receive_fee_native(self, amount: int) -> BurnOutcome | None:
        """Buffer a native fee and burn the native buffer."""
        if amount < 0:
            raise InsufficientAmount(f"Fee cannot be negative: {amount}")
        self._state.buffer_native = to_amount(self._state.buffer_native + amount)
        return self.burn_native_buffer()

    def burn_native_buffer(self) -> BurnOutcome | None:
        """Burn everything in the native buffer; None if it is empty."""
        amount = self._state.buffer_native
        if amount == 0:
            return None
        outcome = self._burner.burn(amount)
        self._state.buffer_native = 0
        self._state.total_native_burned = to_amount(self._state.total_native_burned + amount)
        logger.info(
            "fee_native_burned", amount=amount, total_burned=self._state.total_native_burned
        )
        return outcome

    def receive_fee_foreign(self, amount: int) -> ConversionOutcome:
        """Buffer a foreign fee and attempt to convert the buffer."""
        if amount < 0:
            raise InsufficientAmount(f"Fee cannot be negative: {amount}")
        self._state.buffer_foreign = to_amount(self._state.buffer_foreign + amount)
        return self.try_convert()

    def has_native_to_burn(self) -> bool:
        return self._state.buffer_native > 0

    def has_conversion_pending(self) -> bool:
        """True if the foreign buffer is large enough to convert and the pool can take it."""
        buffered = self._state.buffer_foreign
        return buffered > 0 and buffered >= self.min_swap_foreign and self._pool.has_liquidity()

    def try_convert(self) -> ConversionOutcome:
        """Convert the foreign buffer to native and burn it, slippage permitting."""
        state = self._state
        buffered = state.buffer_foreign
        if buffered == 0 or buffered < self.min_swap_foreign:
            return ConversionOutcome.skipped(ConversionStatus.BELOW_THRESHOLD, buffered)
        if not self._pool.has_liquidity():
            return ConversionOutcome.skipped(ConversionStatus.NO_LIQUIDITY, buffered)

        spot = self._pool.spot_price()
        expected = mul_div(buffered, PRECISION, spot) if spot > 0 else 0
        quoted = self._pool.quote_native_out(buffered)
        shortfall_ppm = 0
        if expected > quoted:
            shortfall_ppm = mul_div(expected - quoted, PPM, expected)

        min_out = mul_div(expected, PPM - self.slippage_tolerance_ppm, PPM)
        if quoted <= 0 or quoted < min_out:
            state.conversions_deferred += 1
            logger.warning(
                "fee_conversion_deferred",
                buffer_foreign=buffered,
                expected_native=expected,
                quoted_native=quoted,
                shortfall_ppm=shortfall_ppm,
            )
            return ConversionOutcome.deferred(buffer_foreign=buffered, shortfall_ppm=shortfall_ppm)

        swap = self._pool.swap_foreign_for_native(buffered, min_out)
        state.buffer_foreign = 0
        state.total_foreign_converted = to_amount(state.total_foreign_converted + buffered)
        state.buffer_native = to_amount(state.buffer_native + swap.amount_out)
        self.burn_native_buffer()

        logger.info(
            "fee_foreign_converted",
            foreign_in=buffered,
            native_burned=swap.amount_out,
            shortfall_ppm=shortfall_ppm,
        )
        return ConversionOutcome.converted(
            foreign_in=buffered, native_burned=swap.amount_out, shortfall_ppm=shortfall_ppm
        )

    def snapshot(self) -> FeeManagerState:
        return copy.copy(self._state)

    def restore(self, state: FeeManagerState) -> None:
        self._state = copy.copy(state)
