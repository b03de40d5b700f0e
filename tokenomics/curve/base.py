"""Result types and capability protocols for the minting curve."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from tokenomics.treasury.allocator import AllocationOutcome


@dataclass(frozen=True)
class MintQuote:
    """Amount a mint would issue and how it would be split."""

    minted: int
    user_share: int
    treasury_share: int


@dataclass(frozen=True)
class MintOutcome:
    """Aggregate result of a mint.

    Attributes:
        minted: Native issued (user_share + treasury_share)
        user_share: Native credited to the buyer
        treasury_share: Native forwarded to treasury-owned liquidity
        foreign_in: Foreign paid, forwarded in full to the treasury
        price_before: Curve price at the pre-mint supply
        price_after: Curve price at the post-mint supply
        allocation: What the treasury did with the forwarded amounts
    """

    minted: int
    user_share: int
    treasury_share: int
    foreign_in: int
    price_before: int
    price_after: int
    allocation: AllocationOutcome | None = None


@dataclass(frozen=True)
class BurnOutcome:
    """Result of destroying native supply."""

    amount: int
    supply_before: int
    supply_after: int
    price_before: int
    price_after: int


@runtime_checkable
class AllocationSink(Protocol):
    """Receives the treasury share of every mint."""

    def receive_mint_allocation(self, native_in: int, foreign_in: int) -> AllocationOutcome: ...


@runtime_checkable
class SupplyBurner(Protocol):
    """Destroys native supply."""

    def burn(self, amount: int) -> BurnOutcome: ...
