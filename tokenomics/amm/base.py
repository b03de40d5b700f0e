"""Result types and capability protocols for the pool."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol, runtime_checkable


class SwapDirection(str, Enum):
    """Which asset enters the pool."""

    FOREIGN_TO_NATIVE = "foreign_to_native"
    NATIVE_TO_FOREIGN = "native_to_foreign"


@dataclass(frozen=True)
class SwapResult:
    """Result of executing a swap against the pool.

    Attributes:
        direction: Which asset was sold into the pool
        amount_in: Full input amount added to the input reserve
        amount_out: Output amount removed from the output reserve
        fee_retained: Part of amount_in that did not count toward pricing
        price_before: Spot price (foreign per native, scaled) before the swap
        price_after: Spot price after the swap
    """

    direction: SwapDirection
    amount_in: int
    amount_out: int
    fee_retained: int
    price_before: int
    price_after: int


@dataclass(frozen=True)
class LiquidityResult:
    """Result of adding or removing liquidity.

    For deposits, ``native``/``foreign`` are the amounts taken into reserves
    and ``native_unused``/``foreign_unused`` what the caller keeps. For
    withdrawals they are the amounts paid out and the unused fields are zero.
    """

    lp_amount: int
    native: int
    foreign: int
    native_unused: int = 0
    foreign_unused: int = 0


@runtime_checkable
class SwapVenue(Protocol):
    """What fee conversion and rebalancing need from the pool."""

    def has_liquidity(self) -> bool: ...

    def spot_price(self) -> int: ...

    def quote_native_out(self, foreign_in: int) -> int: ...

    def quote_foreign_out(self, native_in: int) -> int: ...

    def swap_foreign_for_native(self, amount_in: int, min_out: int = 0) -> SwapResult: ...

    def swap_native_for_foreign(self, amount_in: int, min_out: int = 0) -> SwapResult: ...


@runtime_checkable
class LiquidityVenue(SwapVenue, Protocol):
    """Swap venue that also accepts and returns liquidity."""

    @property
    def reserve_native(self) -> int: ...

    @property
    def reserve_foreign(self) -> int: ...

    @property
    def supply_lp(self) -> int: ...

    @property
    def fee_ppm(self) -> int: ...

    def add_liquidity(self, native: int, foreign: int) -> LiquidityResult: ...

    def remove_liquidity(self, lp_amount: int) -> LiquidityResult: ...
