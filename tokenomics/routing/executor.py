"""Executes a selected route."""

from __future__ import annotations

import structlog

from tokenomics.amm.base import SwapVenue
from tokenomics.curve.minting_curve import MintingCurve
from tokenomics.errors import SlippageExceeded
from tokenomics.routing.types import ExecutionResult, Route

logger = structlog.get_logger()


class SwapExecutor:
    """Runs a trade on the mint or the pool.

    Minimum output is checked against the quote before anything mutates, so
    a rejected trade leaves every component untouched.
    """

    def __init__(self, curve: MintingCurve, pool: SwapVenue) -> None:
        self._curve = curve
        self._pool = pool

    def buy_native(self, route: Route, net_foreign: int, min_out: int = 0) -> ExecutionResult:
        if route is Route.MINT:
            return self._mint(net_foreign, min_out)
        swap = self._pool.swap_foreign_for_native(net_foreign, min_out)
        return ExecutionResult(
            route=Route.POOL,
            amount_out=swap.amount_out,
            price_before=swap.price_before,
            price_after=swap.price_after,
        )

    def sell_native(self, net_native: int, min_out: int = 0) -> ExecutionResult:
        swap = self._pool.swap_native_for_foreign(net_native, min_out)
        return ExecutionResult(
            route=Route.POOL,
            amount_out=swap.amount_out,
            price_before=swap.price_before,
            price_after=swap.price_after,
        )

    def _mint(self, net_foreign: int, min_out: int) -> ExecutionResult:
        quote = self._curve.quote_mint(net_foreign)
        if quote.user_share < min_out:
            raise SlippageExceeded(f"Mint output {quote.user_share} below minimum {min_out}")

        outcome = self._curve.mint(net_foreign)
        lp_minted = outcome.allocation.lp_minted if outcome.allocation is not None else 0
        return ExecutionResult(
            route=Route.MINT,
            amount_out=outcome.user_share,
            price_before=outcome.price_before,
            price_after=outcome.price_after,
            minted=outcome.minted,
            treasury_share=outcome.treasury_share,
            lp_minted=lp_minted,
        )
