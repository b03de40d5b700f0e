"""Router: the single entry point for trading native against foreign.

A buy deducts the router fee once, compares the mint against the pool on
the net amount, executes the better route and only then hands the fee to
the fee manager. A sell always goes through the pool because the curve has
no redemption path.
"""

from __future__ import annotations

import structlog

from tokenomics.amm.base import SwapVenue
from tokenomics.config import RouterConfig
from tokenomics.constants import PPM, PRECISION
from tokenomics.errors import InsufficientAmount, InsufficientLiquidity
from tokenomics.fees.manager import FeeManager
from tokenomics.math.fixed_point import mul_div
from tokenomics.routing.executor import SwapExecutor
from tokenomics.routing.selector import RouteSelector
from tokenomics.routing.types import RouteQuote, SwapOutcome

logger = structlog.get_logger()


class Router:
    """Fee deduction, route selection and execution for one pool and curve."""

    def __init__(
        self,
        config: RouterConfig,
        selector: RouteSelector,
        executor: SwapExecutor,
        fee_manager: FeeManager,
        pool: SwapVenue,
    ) -> None:
        self.fee_ppm = config.fee_ppm
        self.min_swap_foreign = config.min_swap_foreign
        self.min_initial_foreign = config.min_initial_foreign
        self._selector = selector
        self._executor = executor
        self._fee_manager = fee_manager
        self._pool = pool
        self.swap_count = 0

    def fee_for(self, amount_in: int) -> int:
        """Router fee on a gross amount, floored."""
        return mul_div(amount_in, self.fee_ppm, PPM)

    def _validate_buy(self, foreign_in: int) -> None:
        if foreign_in <= 0:
            raise InsufficientAmount(f"Swap amount must be positive, got {foreign_in}")
        if foreign_in < self.min_swap_foreign:
            raise InsufficientAmount(
                f"Swap amount {foreign_in} below minimum {self.min_swap_foreign}"
            )
        if not self._pool.has_liquidity() and foreign_in < self.min_initial_foreign:
            raise InsufficientAmount(
                f"Initial swap amount {foreign_in} below bootstrap minimum "
                f"{self.min_initial_foreign}"
            )

    def quote_foreign_to_native(self, foreign_in: int) -> RouteQuote:
        """Quote a buy without executing it (fee is deducted first)."""
        self._validate_buy(foreign_in)
        net = foreign_in - self.fee_for(foreign_in)
        if net <= 0:
            raise InsufficientAmount(f"Nothing left to route after fee on {foreign_in}")
        return self._selector.select(net)

    def swap_foreign_to_native(self, foreign_in: int, min_native_out: int = 0) -> SwapOutcome:
        """Buy native with ``foreign_in``.

        Raises:
            InsufficientAmount: If the amount is below the trade minimums
            InsufficientLiquidity: If neither route yields any native
            SlippageExceeded: If the output is below ``min_native_out``
        """
        self._validate_buy(foreign_in)
        fee = self.fee_for(foreign_in)
        net = foreign_in - fee
        if net <= 0:
            raise InsufficientAmount(f"Nothing left to route after fee on {foreign_in}")

        quote = self._selector.select(net)
        result = self._executor.buy_native(quote.route, net, min_native_out)

        if fee > 0:
            self._fee_manager.receive_fee_foreign(fee)
        self.swap_count += 1

        logger.debug(
            "swap_executed",
            direction="foreign_to_native",
            route=result.route.value,
            amount_in=foreign_in,
            fee=fee,
            amount_out=result.amount_out,
        )
        return SwapOutcome(
            route=result.route,
            amount_in=foreign_in,
            fee=fee,
            amount_net=net,
            amount_out=result.amount_out,
            price_before=result.price_before,
            price_after=result.price_after,
            minted=result.minted,
            treasury_share=result.treasury_share,
            lp_minted=result.lp_minted,
        )

    def swap_native_to_foreign(self, native_in: int, min_foreign_out: int = 0) -> SwapOutcome:
        """Sell ``native_in`` for foreign through the pool.

        Raises:
            InsufficientLiquidity: If the pool holds no reserves
            InsufficientAmount: If the net amount is worth less than the trade minimum
            SlippageExceeded: If the output is below ``min_foreign_out``
        """
        if native_in <= 0:
            raise InsufficientAmount(f"Swap amount must be positive, got {native_in}")
        if not self._pool.has_liquidity():
            raise InsufficientLiquidity("Pool has no liquidity: native cannot be sold yet")

        fee = self.fee_for(native_in)
        net = native_in - fee
        foreign_value = mul_div(net, self._pool.spot_price(), PRECISION)
        if net <= 0 or foreign_value < self.min_swap_foreign:
            raise InsufficientAmount(
                f"Sell of {native_in} native is worth {foreign_value} foreign, "
                f"below minimum {self.min_swap_foreign}"
            )

        result = self._executor.sell_native(net, min_foreign_out)

        if fee > 0:
            self._fee_manager.receive_fee_native(fee)
        self.swap_count += 1

        logger.debug(
            "swap_executed",
            direction="native_to_foreign",
            route=result.route.value,
            amount_in=native_in,
            fee=fee,
            amount_out=result.amount_out,
        )
        return SwapOutcome(
            route=result.route,
            amount_in=native_in,
            fee=fee,
            amount_net=net,
            amount_out=result.amount_out,
            price_before=result.price_before,
            price_after=result.price_after,
        )
