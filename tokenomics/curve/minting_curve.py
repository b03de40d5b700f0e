"""Linear bonding curve issuing native against foreign payment.

Price rises linearly with supply:

    price(s) = price_initial + slope * s / PRECISION

Minting ``m`` native at supply ``s`` costs the integral of the price over
[s, s + m]. Inverting that integral is a quadratic in ``m``; it is solved in
closed form with a floor integer square root and a floor division, so the
issued amount never costs more than the foreign paid.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from tokenomics.constants import PPM, PRECISION
from tokenomics.curve.base import AllocationSink, BurnOutcome, MintOutcome, MintQuote
from tokenomics.errors import InsufficientAmount, InsufficientSupply, ValidationError
from tokenomics.math.fixed_point import isqrt, mul_div, to_amount
from tokenomics.safe_int import S

logger = structlog.get_logger()


@dataclass
class CurveState:
    """Snapshot of mutable curve state."""

    supply: int = 0


class MintingCurve:
    """Bonding curve with a fixed user/treasury split of each mint.

    Args:
        price_initial: Price at zero supply (foreign per native, scaled)
        slope: Price increase per native of supply (scaled); 0 gives a flat price
        user_ppm: Share of each mint credited to the buyer
        treasury_ppm: Share forwarded to the allocation sink
        allocation_sink: Receives the treasury share and the foreign payment
    """

    def __init__(
        self,
        price_initial: int,
        slope: int,
        user_ppm: int,
        treasury_ppm: int,
        allocation_sink: AllocationSink | None = None,
        supply: int = 0,
    ) -> None:
        if price_initial <= 0:
            raise ValidationError(f"Initial price must be positive, got {price_initial}")
        if slope < 0:
            raise ValidationError(f"Slope cannot be negative, got {slope}")
        if user_ppm < 0 or treasury_ppm < 0 or user_ppm + treasury_ppm != PPM:
            raise ValidationError(
                f"Mint shares must be non-negative and sum to {PPM}, "
                f"got user={user_ppm} treasury={treasury_ppm}"
            )
        self.price_initial = price_initial
        self.slope = slope
        self.user_ppm = user_ppm
        self.treasury_ppm = treasury_ppm
        self._allocation_sink = allocation_sink
        self._state = CurveState(supply=to_amount(supply))

    @property
    def supply(self) -> int:
        return self._state.supply

    def bind_allocation_sink(self, sink: AllocationSink) -> None:
        """Attach the receiver of the treasury share."""
        self._allocation_sink = sink

    def price(self, supply: int | None = None) -> int:
        """Spot price at ``supply`` (current supply by default)."""
        s = self._state.supply if supply is None else supply
        return self.price_initial + mul_div(self.slope, s, PRECISION)

    def quote_mint(self, foreign_in: int) -> MintQuote:
        """Native issued for ``foreign_in`` at the current supply.

        Solves slope*m^2 + (2*p0*P + 2*slope*s)*m - 2*f*P^2 = 0 for m, floored.

        Raises:
            InsufficientAmount: If foreign_in is non-positive or buys nothing
        """
        if foreign_in <= 0:
            raise InsufficientAmount(f"Mint payment must be positive, got {foreign_in}")

        supply = self._state.supply
        if self.slope == 0:
            minted = mul_div(foreign_in, PRECISION, self.price_initial)
        else:
            a = S(self.slope)
            b = S(2) * S(self.price_initial) * PRECISION + S(2) * a * supply
            c = S(2) * S(foreign_in) * PRECISION * PRECISION
            discriminant = b * b + S(4) * a * c
            minted = ((S(isqrt(discriminant)) - b) // (S(2) * a)).value

        if minted <= 0:
            raise InsufficientAmount(f"Mint payment {foreign_in} too small to issue supply")

        minted = to_amount(minted)
        user_share = mul_div(minted, self.user_ppm, PPM)
        return MintQuote(
            minted=minted,
            user_share=user_share,
            treasury_share=minted - user_share,
        )

    def quote_cost(self, native_out: int) -> int:
        """Foreign cost of issuing ``native_out`` at the current supply (rounded up)."""
        if native_out <= 0:
            return 0
        supply = self._state.supply
        m = S(native_out)
        linear = S(2) * S(self.price_initial) * PRECISION * m
        quadratic = S(self.slope) * (S(2) * supply * m + m * m)
        return (linear + quadratic).ceiling_div(S(2) * PRECISION * PRECISION).to_amount()

    def mint(self, foreign_in: int) -> MintOutcome:
        """Issue native for ``foreign_in`` and forward the treasury share.

        The full foreign payment is forwarded with the treasury share; the
        caller receives ``user_share``.
        """
        quote = self.quote_mint(foreign_in)
        price_before = self.price()
        self._state.supply = to_amount(self._state.supply + quote.minted)
        price_after = self.price()

        allocation = None
        if self._allocation_sink is not None:
            allocation = self._allocation_sink.receive_mint_allocation(
                quote.treasury_share, foreign_in
            )

        logger.debug(
            "mint_executed",
            foreign_in=foreign_in,
            minted=quote.minted,
            user_share=quote.user_share,
            treasury_share=quote.treasury_share,
            supply=self._state.supply,
        )
        return MintOutcome(
            minted=quote.minted,
            user_share=quote.user_share,
            treasury_share=quote.treasury_share,
            foreign_in=foreign_in,
            price_before=price_before,
            price_after=price_after,
            allocation=allocation,
        )

    def burn(self, amount: int) -> BurnOutcome:
        """Destroy ``amount`` of native supply.

        Raises:
            InsufficientAmount: If amount is non-positive
            InsufficientSupply: If amount exceeds the outstanding supply
        """
        if amount <= 0:
            raise InsufficientAmount(f"Burn amount must be positive, got {amount}")
        supply_before = self._state.supply
        if amount > supply_before:
            raise InsufficientSupply(f"Burn of {amount} exceeds supply {supply_before}")

        price_before = self.price()
        self._state.supply = supply_before - amount
        logger.debug("supply_burned", amount=amount, supply=self._state.supply)
        return BurnOutcome(
            amount=amount,
            supply_before=supply_before,
            supply_after=self._state.supply,
            price_before=price_before,
            price_after=self.price(),
        )

    def snapshot(self) -> CurveState:
        return CurveState(supply=self._state.supply)

    def restore(self, state: CurveState) -> None:
        self._state = CurveState(supply=state.supply)
