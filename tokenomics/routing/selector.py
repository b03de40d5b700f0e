"""Chooses between minting and swapping for a foreign-to-native trade."""

from __future__ import annotations

import structlog

from tokenomics.amm.base import SwapVenue
from tokenomics.curve.minting_curve import MintingCurve
from tokenomics.errors import InsufficientAmount, InsufficientLiquidity
from tokenomics.routing.types import Route, RouteQuote

logger = structlog.get_logger()


class RouteSelector:
    """Quotes the mint and the pool and picks the larger output.

    The mint is compared on the buyer's share only. Ties go to the mint,
    which also grows treasury liquidity.
    """

    def __init__(self, curve: MintingCurve, pool: SwapVenue) -> None:
        self._curve = curve
        self._pool = pool

    def mint_output(self, net_foreign: int) -> int:
        try:
            return self._curve.quote_mint(net_foreign).user_share
        except InsufficientAmount:
            return 0

    def pool_output(self, net_foreign: int) -> int:
        if not self._pool.has_liquidity():
            return 0
        return self._pool.quote_native_out(net_foreign)

    def select(self, net_foreign: int) -> RouteQuote:
        """Quote both routes for ``net_foreign`` (fee already deducted).

        Raises:
            InsufficientLiquidity: If neither route yields any native
        """
        mint_out = self.mint_output(net_foreign)
        pool_out = self.pool_output(net_foreign)

        if mint_out == 0 and pool_out == 0:
            raise InsufficientLiquidity(f"No route yields native for {net_foreign} foreign")

        if mint_out >= pool_out:
            route, amount_out = Route.MINT, mint_out
        else:
            route, amount_out = Route.POOL, pool_out

        logger.debug(
            "route_selected",
            route=route.value,
            net_foreign=net_foreign,
            mint_out=mint_out,
            pool_out=pool_out,
        )
        return RouteQuote(route=route, amount_out=amount_out, mint_out=mint_out, pool_out=pool_out)
