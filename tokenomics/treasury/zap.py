"""Zap: turn a mismatched native/foreign pair into pool liquidity.

A zap first deposits whatever part of the pair already matches the pool
ratio. If foreign is left over, the optimal single-sided amount is swapped
into native through the pool itself and the resulting pair is deposited.
Leftover native is never sold; it waits for foreign from a later mint.
Whatever cannot be paired is returned to the caller's buffer.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tokenomics.amm.base import LiquidityVenue
from tokenomics.constants import PPM
from tokenomics.math.fixed_point import isqrt, mul_div
from tokenomics.safe_int import S

logger = structlog.get_logger()


@dataclass(frozen=True)
class ZapResult:
    """Aggregate effect of one zap.

    Attributes:
        lp_minted: LP tokens minted across all deposits
        native_add: Native deposited into reserves
        foreign_add: Foreign deposited into reserves
        foreign_swapped: Foreign sold into the pool to rebalance
        native_from_swap: Native received from the rebalancing swap
        native_left: Native that could not be paired
        foreign_left: Foreign that could not be paired
    """

    lp_minted: int = 0
    native_add: int = 0
    foreign_add: int = 0
    foreign_swapped: int = 0
    native_from_swap: int = 0
    native_left: int = 0
    foreign_left: int = 0


def optimal_swap_amount(amount: int, reserve_in: int, fee_ppm: int) -> int:
    """Part of a single-sided ``amount`` to swap so the rest pairs exactly.

    With g = PPM - fee_ppm:

        s = (sqrt(R^2 (PPM + g)^2 + 4 g PPM R A) - R (PPM + g)) / (2 g)

    which reduces to sqrt(R (R + A)) - R for a fee-free pool.
    """
    if amount <= 0 or reserve_in <= 0:
        return 0
    g = S(PPM - fee_ppm)
    r = S(reserve_in)
    scaled = r * (S(PPM) + g)
    root = isqrt(scaled * scaled + S(4) * g * PPM * r * amount)
    return ((S(root) - scaled) // (S(2) * g)).value


class Zap:
    """Balances and deposits treasury funds into a liquidity venue."""

    def __init__(self, pool: LiquidityVenue, dust_threshold: int = 1) -> None:
        self._pool = pool
        self.dust_threshold = max(dust_threshold, 1)

    def _lp_preview(self, native: int, foreign: int) -> int:
        pool = self._pool
        if native <= 0 or foreign <= 0:
            return 0
        if pool.supply_lp == 0:
            return isqrt(S(native) * S(foreign))
        return min(
            mul_div(native, pool.supply_lp, pool.reserve_native),
            mul_div(foreign, pool.supply_lp, pool.reserve_foreign),
        )

    def _rebalance_amount(self, foreign_excess: int) -> int:
        pool = self._pool
        if foreign_excess < self.dust_threshold or not pool.has_liquidity():
            return 0
        amount = optimal_swap_amount(foreign_excess, pool.reserve_foreign, pool.fee_ppm)
        if amount <= 0 or pool.quote_native_out(amount) <= 0:
            return 0
        return amount

    def would_progress(self, native: int, foreign: int) -> bool:
        """True if executing on this pair would deposit or rebalance anything."""
        if not self._pool.has_liquidity():
            return native > 0 and foreign > 0
        return self._lp_preview(native, foreign) > 0 or self._rebalance_amount(foreign) > 0

    def execute(self, native: int, foreign: int) -> ZapResult:
        """Deposit as much of (native, foreign) as the pool ratio allows."""
        pool = self._pool

        if not pool.has_liquidity():
            if native <= 0 or foreign <= 0:
                logger.debug("zap_waiting_for_pair", native=native, foreign=foreign)
                return ZapResult(native_left=native, foreign_left=foreign)
            deposit = pool.add_liquidity(native, foreign)
            logger.info(
                "zap_initialized_pool",
                lp_minted=deposit.lp_amount,
                native=deposit.native,
                foreign=deposit.foreign,
            )
            return ZapResult(
                lp_minted=deposit.lp_amount,
                native_add=deposit.native,
                foreign_add=deposit.foreign,
                native_left=deposit.native_unused,
                foreign_left=deposit.foreign_unused,
            )

        lp_minted = native_add = foreign_add = 0
        foreign_swapped = native_from_swap = 0

        if self._lp_preview(native, foreign) > 0:
            deposit = pool.add_liquidity(native, foreign)
            lp_minted += deposit.lp_amount
            native_add += deposit.native
            foreign_add += deposit.foreign
            native, foreign = deposit.native_unused, deposit.foreign_unused

        swap_amount = self._rebalance_amount(foreign)
        if swap_amount > 0:
            swap = pool.swap_foreign_for_native(swap_amount)
            foreign_swapped = swap.amount_in
            native_from_swap = swap.amount_out
            foreign -= swap.amount_in
            native += swap.amount_out

            if self._lp_preview(native, foreign) > 0:
                deposit = pool.add_liquidity(native, foreign)
                lp_minted += deposit.lp_amount
                native_add += deposit.native
                foreign_add += deposit.foreign
                native, foreign = deposit.native_unused, deposit.foreign_unused

        logger.debug(
            "zap_executed",
            lp_minted=lp_minted,
            native_add=native_add,
            foreign_add=foreign_add,
            foreign_swapped=foreign_swapped,
            native_left=native,
            foreign_left=foreign,
        )
        return ZapResult(
            lp_minted=lp_minted,
            native_add=native_add,
            foreign_add=foreign_add,
            foreign_swapped=foreign_swapped,
            native_from_swap=native_from_swap,
            native_left=native,
            foreign_left=foreign,
        )
