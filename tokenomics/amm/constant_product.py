"""Constant-product (x * y = k) pool between the native and foreign asset.

The pool charges its fee on input: only ``amount_in * (PPM - fee_ppm) / PPM``
takes part in pricing, while the full input is added to the input reserve,
so k grows with every fee-bearing swap. Quoting and execution both go
through ``quote_out`` so a quote is always the exact realized output.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tokenomics.amm.base import LiquidityResult, SwapDirection, SwapResult
from tokenomics.constants import PPM, PRECISION
from tokenomics.errors import (
    ConservationViolation,
    InsufficientAmount,
    InsufficientLiquidity,
    SlippageExceeded,
    ValidationError,
)
from tokenomics.math.fixed_point import isqrt, mul_div, mul_div_ceil, to_amount
from tokenomics.safe_int import S

logger = structlog.get_logger()


@dataclass
class PoolState:
    """Snapshot of mutable pool state."""

    reserve_native: int = 0
    reserve_foreign: int = 0
    supply_lp: int = 0


class ConstantProductPool:
    """Native/foreign constant-product pool with fee-on-input pricing."""

    def __init__(self, fee_ppm: int = 0) -> None:
        if not 0 <= fee_ppm < PPM:
            raise ValidationError(f"Pool fee must be in [0, {PPM}), got {fee_ppm}")
        self._fee_ppm = fee_ppm
        self._state = PoolState()

    @property
    def fee_ppm(self) -> int:
        return self._fee_ppm

    @property
    def fee_multiplier(self) -> int:
        """Share of each input that takes part in pricing (PPM - fee_ppm)."""
        return PPM - self._fee_ppm

    @property
    def reserve_native(self) -> int:
        return self._state.reserve_native

    @property
    def reserve_foreign(self) -> int:
        return self._state.reserve_foreign

    @property
    def supply_lp(self) -> int:
        return self._state.supply_lp

    @property
    def k(self) -> int:
        """Constant product of the reserves."""
        return self._state.reserve_native * self._state.reserve_foreign

    def has_liquidity(self) -> bool:
        return self._state.reserve_native > 0 and self._state.reserve_foreign > 0

    def spot_price(self) -> int:
        """Foreign per native, scaled by PRECISION.

        Raises:
            InsufficientLiquidity: If the pool holds no reserves
        """
        if not self.has_liquidity():
            raise InsufficientLiquidity("Pool has no liquidity: spot price undefined")
        return mul_div(self._state.reserve_foreign, PRECISION, self._state.reserve_native)

    # --- Quoting ---

    def quote_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Output for ``amount_in`` against the given reserves.

        Formula: eff = in * (PPM - fee) / PPM; out = res_out * eff / (res_in + eff)

        Returns 0 for non-positive input or empty reserves.
        """
        if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
            return 0

        effective_in = mul_div(amount_in, self.fee_multiplier, PPM)
        numerator = S(reserve_out) * S(effective_in)
        denominator = S(reserve_in) + S(effective_in)
        if denominator == 0:
            return 0
        return (numerator // denominator).to_amount()

    def quote_native_out(self, foreign_in: int) -> int:
        """Native received for selling ``foreign_in`` into the pool."""
        return self.quote_out(foreign_in, self._state.reserve_foreign, self._state.reserve_native)

    def quote_foreign_out(self, native_in: int) -> int:
        """Foreign received for selling ``native_in`` into the pool."""
        return self.quote_out(native_in, self._state.reserve_native, self._state.reserve_foreign)

    # --- Swaps ---

    def swap_foreign_for_native(self, amount_in: int, min_out: int = 0) -> SwapResult:
        """Sell foreign into the pool for native."""
        return self._swap(SwapDirection.FOREIGN_TO_NATIVE, amount_in, min_out)

    def swap_native_for_foreign(self, amount_in: int, min_out: int = 0) -> SwapResult:
        """Sell native into the pool for foreign."""
        return self._swap(SwapDirection.NATIVE_TO_FOREIGN, amount_in, min_out)

    def _swap(self, direction: SwapDirection, amount_in: int, min_out: int) -> SwapResult:
        if amount_in <= 0:
            raise InsufficientAmount(f"Swap input must be positive, got {amount_in}")
        if not self.has_liquidity():
            raise InsufficientLiquidity("Pool has no liquidity")

        state = self._state
        if direction is SwapDirection.FOREIGN_TO_NATIVE:
            reserve_in, reserve_out = state.reserve_foreign, state.reserve_native
        else:
            reserve_in, reserve_out = state.reserve_native, state.reserve_foreign

        amount_out = self.quote_out(amount_in, reserve_in, reserve_out)
        if amount_out <= 0:
            raise InsufficientAmount(f"Swap of {amount_in} produces no output")
        if amount_out < min_out:
            raise SlippageExceeded(f"Pool output {amount_out} below minimum {min_out}")

        new_in = to_amount(reserve_in + amount_in)
        new_out = reserve_out - amount_out
        k_before = reserve_in * reserve_out
        if new_in * new_out < k_before:
            raise ConservationViolation(
                f"Swap would decrease k: {k_before} -> {new_in * new_out}"
            )

        price_before = self.spot_price()
        if direction is SwapDirection.FOREIGN_TO_NATIVE:
            state.reserve_foreign, state.reserve_native = new_in, new_out
        else:
            state.reserve_native, state.reserve_foreign = new_in, new_out
        price_after = self.spot_price()

        fee_retained = amount_in - mul_div(amount_in, self.fee_multiplier, PPM)
        logger.debug(
            "pool_swap",
            direction=direction.value,
            amount_in=amount_in,
            amount_out=amount_out,
            price_before=price_before,
            price_after=price_after,
        )
        return SwapResult(
            direction=direction,
            amount_in=amount_in,
            amount_out=amount_out,
            fee_retained=fee_retained,
            price_before=price_before,
            price_after=price_after,
        )

    # --- Liquidity ---

    def add_liquidity(self, native: int, foreign: int) -> LiquidityResult:
        """Deposit a native/foreign pair and mint LP tokens.

        The first deposit fixes the price ratio and mints isqrt(native * foreign).
        Later deposits mint in proportion to the smaller relative contribution
        and take ceil(reserve * lp / supply) of each side; whatever the ratio
        does not absorb is reported back as unused.

        Raises:
            InsufficientAmount: If either side is non-positive or no LP would be minted
        """
        if native <= 0 or foreign <= 0:
            raise InsufficientAmount(
                f"Liquidity requires both sides positive, got native={native} foreign={foreign}"
            )

        state = self._state
        if state.supply_lp == 0:
            lp_minted = isqrt(S(native) * S(foreign))
            native_used, foreign_used = native, foreign
        else:
            lp_minted = min(
                mul_div(native, state.supply_lp, state.reserve_native),
                mul_div(foreign, state.supply_lp, state.reserve_foreign),
            )
            native_used = mul_div_ceil(state.reserve_native, lp_minted, state.supply_lp)
            foreign_used = mul_div_ceil(state.reserve_foreign, lp_minted, state.supply_lp)

        if lp_minted <= 0:
            raise InsufficientAmount(
                f"Deposit native={native} foreign={foreign} too small to mint LP"
            )

        state.reserve_native = to_amount(state.reserve_native + native_used)
        state.reserve_foreign = to_amount(state.reserve_foreign + foreign_used)
        state.supply_lp = to_amount(state.supply_lp + lp_minted)

        logger.debug(
            "liquidity_added",
            lp_minted=lp_minted,
            native=native_used,
            foreign=foreign_used,
            supply_lp=state.supply_lp,
        )
        return LiquidityResult(
            lp_amount=lp_minted,
            native=native_used,
            foreign=foreign_used,
            native_unused=native - native_used,
            foreign_unused=foreign - foreign_used,
        )

    def remove_liquidity(self, lp_amount: int) -> LiquidityResult:
        """Burn LP tokens for a floored pro-rata share of both reserves.

        Raises:
            InsufficientAmount: If lp_amount is non-positive
            InsufficientLiquidity: If lp_amount exceeds the LP supply
        """
        if lp_amount <= 0:
            raise InsufficientAmount(f"LP amount must be positive, got {lp_amount}")

        state = self._state
        if lp_amount > state.supply_lp:
            raise InsufficientLiquidity(
                f"LP amount {lp_amount} exceeds supply {state.supply_lp}"
            )

        native_out = mul_div(state.reserve_native, lp_amount, state.supply_lp)
        foreign_out = mul_div(state.reserve_foreign, lp_amount, state.supply_lp)

        state.reserve_native -= native_out
        state.reserve_foreign -= foreign_out
        state.supply_lp -= lp_amount

        logger.debug(
            "liquidity_removed",
            lp_burned=lp_amount,
            native=native_out,
            foreign=foreign_out,
            supply_lp=state.supply_lp,
        )
        return LiquidityResult(lp_amount=lp_amount, native=native_out, foreign=foreign_out)

    # --- Snapshots ---

    def snapshot(self) -> PoolState:
        return PoolState(
            reserve_native=self._state.reserve_native,
            reserve_foreign=self._state.reserve_foreign,
            supply_lp=self._state.supply_lp,
        )

    def restore(self, state: PoolState) -> None:
        self._state = PoolState(state.reserve_native, state.reserve_foreign, state.supply_lp)
