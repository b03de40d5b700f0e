"""Request and response models for the HTTP API.

Amounts are decimal strings scaled by 1e12; field names are camelCase on
the wire.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from tokenomics.engine import BucketState, EngineState
from tokenomics.models.types import AmountStr, Identifier
from tokenomics.routing.types import Route, RouteQuote, SwapOutcome
from tokenomics.scheduling import CycleReport
from tokenomics.treasury.allocator import UnwindOutcome


class QuoteRequest(BaseModel):
    """Quote a foreign-to-native buy."""

    amount_in: AmountStr = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Execute a swap for an account."""

    account: Identifier
    amount_in: AmountStr = Field(alias="amountIn")
    min_amount_out: AmountStr = Field(default="0", alias="minAmountOut")

    model_config = {"populate_by_name": True}


class DepositRequest(BaseModel):
    """Credit external foreign to an account."""

    amount: AmountStr


class UnwindRequest(BaseModel):
    """Withdraw liquidity from a treasury bucket."""

    caller: Identifier
    bucket_id: Identifier = Field(alias="bucketId")
    lp_amount: AmountStr = Field(alias="lpAmount")
    destination: Identifier

    model_config = {"populate_by_name": True}


class ProcessRequest(BaseModel):
    """Run one cycle of deferred work."""

    budget: int | None = Field(default=None, ge=0)


class QuoteResponse(BaseModel):
    """Best route for a buy, with both candidate outputs."""

    route: Route
    fee: AmountStr
    amount_out: AmountStr = Field(alias="amountOut")
    mint_out: AmountStr = Field(alias="mintOut")
    pool_out: AmountStr = Field(alias="poolOut")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: RouteQuote, fee: int) -> QuoteResponse:
        return cls(
            route=quote.route,
            fee=fee,
            amount_out=quote.amount_out,
            mint_out=quote.mint_out,
            pool_out=quote.pool_out,
        )


class SwapResponse(BaseModel):
    """Outcome of an executed swap."""

    route: Route
    amount_in: AmountStr = Field(alias="amountIn")
    fee: AmountStr
    amount_net: AmountStr = Field(alias="amountNet")
    amount_out: AmountStr = Field(alias="amountOut")
    price_before: AmountStr = Field(alias="priceBefore")
    price_after: AmountStr = Field(alias="priceAfter")
    minted: AmountStr = "0"
    treasury_share: AmountStr = Field(default="0", alias="treasuryShare")
    lp_minted: AmountStr = Field(default="0", alias="lpMinted")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_outcome(cls, outcome: SwapOutcome) -> SwapResponse:
        return cls(
            route=outcome.route,
            amount_in=outcome.amount_in,
            fee=outcome.fee,
            amount_net=outcome.amount_net,
            amount_out=outcome.amount_out,
            price_before=outcome.price_before,
            price_after=outcome.price_after,
            minted=outcome.minted,
            treasury_share=outcome.treasury_share,
            lp_minted=outcome.lp_minted,
        )


class AccountResponse(BaseModel):
    """Ledger balances of one account."""

    account: str
    native: AmountStr
    foreign: AmountStr


class UnwindResponse(BaseModel):
    """Liquidity released from a bucket."""

    bucket_id: str = Field(alias="bucketId")
    lp_burned: AmountStr = Field(alias="lpBurned")
    native_out: AmountStr = Field(alias="nativeOut")
    foreign_out: AmountStr = Field(alias="foreignOut")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_outcome(cls, outcome: UnwindOutcome) -> UnwindResponse:
        return cls(
            bucket_id=outcome.bucket_id,
            lp_burned=outcome.lp_burned,
            native_out=outcome.native_out,
            foreign_out=outcome.foreign_out,
        )


class CycleResponse(BaseModel):
    """Work serviced and deferred by one processing cycle."""

    serviced: list[str]
    deferred: list[str]
    budget_used: int = Field(alias="budgetUsed")
    cursor: str | None = None

    model_config = {"populate_by_name": True}

    @classmethod
    def from_report(cls, report: CycleReport) -> CycleResponse:
        return cls(
            serviced=report.serviced,
            deferred=report.deferred,
            budget_used=report.budget_used,
            cursor=report.cursor,
        )


class BucketResponse(BaseModel):
    """State of one treasury bucket."""

    id: str
    weight_ppm: int = Field(alias="weightPpm")
    lp_tokens: AmountStr = Field(alias="lpTokens")
    contributed_native: AmountStr = Field(alias="contributedNative")
    contributed_foreign: AmountStr = Field(alias="contributedForeign")
    native_value: AmountStr = Field(alias="nativeValue")
    foreign_value: AmountStr = Field(alias="foreignValue")
    locked: bool

    model_config = {"populate_by_name": True}

    @classmethod
    def from_state(cls, bucket: BucketState) -> BucketResponse:
        return cls(
            id=bucket.id,
            weight_ppm=bucket.weight_ppm,
            lp_tokens=bucket.lp_tokens,
            contributed_native=bucket.contributed_native,
            contributed_foreign=bucket.contributed_foreign,
            native_value=bucket.native_value,
            foreign_value=bucket.foreign_value,
            locked=bucket.locked,
        )


class StateResponse(BaseModel):
    """Snapshot of the engine."""

    supply: AmountStr
    curve_price: AmountStr = Field(alias="curvePrice")
    reserve_native: AmountStr = Field(alias="reserveNative")
    reserve_foreign: AmountStr = Field(alias="reserveForeign")
    supply_lp: AmountStr = Field(alias="supplyLp")
    spot_price: AmountStr | None = Field(default=None, alias="spotPrice")
    treasury_buffer_native: AmountStr = Field(alias="treasuryBufferNative")
    treasury_buffer_foreign: AmountStr = Field(alias="treasuryBufferForeign")
    fee_buffer_native: AmountStr = Field(alias="feeBufferNative")
    fee_buffer_foreign: AmountStr = Field(alias="feeBufferForeign")
    total_native_burned: AmountStr = Field(alias="totalNativeBurned")
    total_foreign_converted: AmountStr = Field(alias="totalForeignConverted")
    conversions_deferred: int = Field(alias="conversionsDeferred")
    swap_count: int = Field(alias="swapCount")
    buckets: list[BucketResponse]

    model_config = {"populate_by_name": True}

    @classmethod
    def from_state(cls, state: EngineState) -> StateResponse:
        return cls(
            supply=state.supply,
            curve_price=state.curve_price,
            reserve_native=state.reserve_native,
            reserve_foreign=state.reserve_foreign,
            supply_lp=state.supply_lp,
            spot_price=state.spot_price,
            treasury_buffer_native=state.treasury_buffer_native,
            treasury_buffer_foreign=state.treasury_buffer_foreign,
            fee_buffer_native=state.fee_buffer_native,
            fee_buffer_foreign=state.fee_buffer_foreign,
            total_native_burned=state.total_native_burned,
            total_foreign_converted=state.total_foreign_converted,
            conversions_deferred=state.conversions_deferred,
            swap_count=state.swap_count,
            buckets=[BucketResponse.from_state(b) for b in state.buckets],
        )


class ErrorResponse(BaseModel):
    """Body returned for a rejected operation."""

    code: str
    detail: str
