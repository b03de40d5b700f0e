"""Type definitions for routing module."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Route(str, Enum):
    """Where a swap is settled."""

    MINT = "mint"
    POOL = "pool"


@dataclass(frozen=True)
class RouteQuote:
    """Comparison of both routes for a net foreign amount."""

    route: Route
    amount_out: int
    mint_out: int
    pool_out: int


@dataclass(frozen=True)
class ExecutionResult:
    """What the executor did on the chosen route."""

    route: Route
    amount_out: int
    price_before: int
    price_after: int
    minted: int = 0
    treasury_share: int = 0
    lp_minted: int = 0


@dataclass(frozen=True)
class SwapOutcome:
    """Aggregate result of a router call.

    Attributes:
        route: Route the swap settled on
        amount_in: Gross amount paid by the caller
        fee: Router fee deducted from amount_in (same asset)
        amount_net: amount_in - fee, the amount actually routed
        amount_out: Amount delivered to the caller
        price_before: Price on the chosen route before execution
        price_after: Price on the chosen route after execution
        minted: Total native issued (mint route only)
        treasury_share: Native forwarded to the treasury (mint route only)
        lp_minted: LP minted for the treasury by this swap (mint route only)
    """

    route: Route
    amount_in: int
    fee: int
    amount_net: int
    amount_out: int
    price_before: int
    price_after: int
    minted: int = 0
    treasury_share: int = 0
    lp_minted: int = 0


__all__ = ["ExecutionResult", "Route", "RouteQuote", "SwapOutcome"]
