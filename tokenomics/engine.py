"""The engine: single owner of every component.

TokenomicsEngine builds the pool, curve, treasury allocator, fee manager,
router and deferred-work scheduler from one SystemConfig and wires them by
constructor injection. Each public operation runs atomically: component
state is snapshotted on entry and restored if anything raises. The
conservation invariants are checked before the ledger movements of the
operation are applied, and a movement the ledger rejects rolls the
components back as well.

Usage:
    engine = create_system()
    engine.deposit_foreign("alice", 1_000 * PRECISION)
    outcome = engine.buy_native("alice", 1_000 * PRECISION)
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

import structlog

from tokenomics.amm.constant_product import ConstantProductPool, PoolState
from tokenomics.config import DEFAULT_CONFIG, SystemConfig
from tokenomics.curve.minting_curve import CurveState, MintingCurve
from tokenomics.errors import (
    ConservationViolation,
    InsufficientAmount,
    InsufficientBalance,
    Unauthorized,
)
from tokenomics.fees.manager import FeeManager, FeeManagerState
from tokenomics.ledger import Asset, InMemoryLedger, Ledger, LedgerBatch
from tokenomics.routing.executor import SwapExecutor
from tokenomics.routing.router import Router
from tokenomics.routing.selector import RouteSelector
from tokenomics.routing.types import RouteQuote, SwapOutcome
from tokenomics.scheduling import BudgetedScheduler, CycleReport
from tokenomics.treasury.allocator import AllocatorState, TreasuryAllocator, UnwindOutcome

logger = structlog.get_logger()

DEFAULT_AUTHORITY = "governance"

# Deferred work task keys
TASK_NATIVE_BURN = "fees.native_burn"
TASK_FOREIGN_CONVERSION = "fees.foreign_conversion"
TASK_ZAP = "treasury.zap"


@dataclass(frozen=True)
class BucketState:
    """Read-only view of one treasury bucket."""

    id: str
    weight_ppm: int
    lp_tokens: int
    contributed_native: int
    contributed_foreign: int
    native_value: int
    foreign_value: int
    locked: bool


@dataclass(frozen=True)
class EngineState:
    """Read-only view of the whole engine."""

    supply: int
    curve_price: int
    reserve_native: int
    reserve_foreign: int
    supply_lp: int
    spot_price: int | None
    treasury_buffer_native: int
    treasury_buffer_foreign: int
    fee_buffer_native: int
    fee_buffer_foreign: int
    total_native_burned: int
    total_foreign_converted: int
    conversions_deferred: int
    swap_count: int
    circulating_native: int
    foreign_held: int
    buckets: list[BucketState] = field(default_factory=list)


@dataclass
class _Snapshot:
    pool: PoolState
    curve: CurveState
    allocator: AllocatorState
    fee_manager: FeeManagerState
    swap_count: int
    cursor: str | None
    circulating_native: int
    foreign_held: int


class TokenomicsEngine:
    """Owning aggregate of all engine components.

    Args:
        config: Engine parameters
        ledger: Account store receiving debits and credits
        authority: Identity allowed to unwind treasury buckets
    """

    def __init__(
        self,
        config: SystemConfig = DEFAULT_CONFIG,
        ledger: Ledger | None = None,
        authority: str = DEFAULT_AUTHORITY,
    ) -> None:
        self.config = config
        self.ledger: Ledger = ledger if ledger is not None else InMemoryLedger()
        self.authority = authority

        self.pool = ConstantProductPool(fee_ppm=config.pool.fee_ppm)
        self.allocator = TreasuryAllocator(
            pool=self.pool,
            bucket_weights=config.treasury.bucket_weights,
            dust_threshold=config.treasury.dust_threshold,
        )
        self.curve = MintingCurve(
            price_initial=config.curve.price_initial,
            slope=config.curve.slope,
            user_ppm=config.curve.mint_shares.user_ppm,
            treasury_ppm=config.curve.mint_shares.treasury_ppm,
            allocation_sink=self.allocator,
        )
        self.fee_manager = FeeManager(
            pool=self.pool,
            burner=self.curve,
            min_swap_foreign=config.fee_manager.min_swap_foreign,
            slippage_tolerance_ppm=config.fee_manager.slippage_tolerance_ppm,
        )
        self.router = Router(
            config=config.router,
            selector=RouteSelector(self.curve, self.pool),
            executor=SwapExecutor(self.curve, self.pool),
            fee_manager=self.fee_manager,
            pool=self.pool,
        )

        self.scheduler = BudgetedScheduler(config.scheduler.cycle_budget)
        self.scheduler.register(
            TASK_NATIVE_BURN,
            config.scheduler.burn_cost,
            is_pending=self.fee_manager.has_native_to_burn,
            execute=self.fee_manager.burn_native_buffer,
        )
        self.scheduler.register(
            TASK_FOREIGN_CONVERSION,
            config.scheduler.conversion_cost,
            is_pending=self.fee_manager.has_conversion_pending,
            execute=self.fee_manager.try_convert,
        )
        self.scheduler.register(
            TASK_ZAP,
            config.scheduler.zap_cost,
            is_pending=self.allocator.has_pending_work,
            execute=self.allocator.flush,
        )

        # Native held by accounts and foreign held by the engine's components
        self.circulating_native = 0
        self.foreign_held = 0

    # --- Atomicity ---

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            pool=self.pool.snapshot(),
            curve=self.curve.snapshot(),
            allocator=self.allocator.snapshot(),
            fee_manager=self.fee_manager.snapshot(),
            swap_count=self.router.swap_count,
            cursor=self.scheduler.cursor,
            circulating_native=self.circulating_native,
            foreign_held=self.foreign_held,
        )

    def _restore(self, snap: _Snapshot) -> None:
        self.pool.restore(snap.pool)
        self.curve.restore(snap.curve)
        self.allocator.restore(snap.allocator)
        self.fee_manager.restore(snap.fee_manager)
        self.router.swap_count = snap.swap_count
        self.scheduler.cursor = snap.cursor
        self.circulating_native = snap.circulating_native
        self.foreign_held = snap.foreign_held

    @contextmanager
    def _atomic(self, operation: str) -> Iterator[LedgerBatch]:
        snap = self._snapshot()
        batch = LedgerBatch(self.ledger)
        try:
            yield batch
            self.check_conservation()
            batch.apply()
        except Exception as err:
            self._restore(snap)
            logger.debug("operation_rolled_back", operation=operation, error=type(err).__name__)
            raise

    def _require_balance(self, account: str, asset: Asset, amount: int) -> None:
        if amount <= 0:
            raise InsufficientAmount(f"Amount must be positive, got {amount}")
        balance = self.ledger.balance_of(account, asset)
        if balance < amount:
            raise InsufficientBalance(
                f"Account {account} holds {balance} {asset.value}, needs {amount}"
            )

    # --- Public operations ---

    def deposit_foreign(self, account: str, amount: int) -> int:
        """Credit external foreign to an account (simulation faucet)."""
        if amount <= 0:
            raise InsufficientAmount(f"Deposit must be positive, got {amount}")
        self.ledger.credit(account, Asset.FOREIGN, amount)
        logger.debug("foreign_deposited", account=account, amount=amount)
        return self.ledger.balance_of(account, Asset.FOREIGN)

    def quote_buy(self, foreign_in: int) -> RouteQuote:
        """Best route for buying native with ``foreign_in``; nothing changes."""
        return self.router.quote_foreign_to_native(foreign_in)

    def buy_native(self, account: str, foreign_in: int, min_native_out: int = 0) -> SwapOutcome:
        """Spend ``foreign_in`` from ``account`` on native."""
        self._require_balance(account, Asset.FOREIGN, foreign_in)
        with self._atomic("buy_native") as batch:
            outcome = self.router.swap_foreign_to_native(foreign_in, min_native_out)
            self.foreign_held += foreign_in
            self.circulating_native += outcome.amount_out
            batch.debit(account, Asset.FOREIGN, foreign_in)
            batch.credit(account, Asset.NATIVE, outcome.amount_out)

        logger.info(
            "native_bought",
            account=account,
            route=outcome.route.value,
            foreign_in=foreign_in,
            native_out=outcome.amount_out,
            fee=outcome.fee,
        )
        return outcome

    def sell_native(self, account: str, native_in: int, min_foreign_out: int = 0) -> SwapOutcome:
        """Sell ``native_in`` from ``account`` for foreign."""
        self._require_balance(account, Asset.NATIVE, native_in)
        with self._atomic("sell_native") as batch:
            outcome = self.router.swap_native_to_foreign(native_in, min_foreign_out)
            self.circulating_native -= native_in
            self.foreign_held -= outcome.amount_out
            batch.debit(account, Asset.NATIVE, native_in)
            batch.credit(account, Asset.FOREIGN, outcome.amount_out)

        logger.info(
            "native_sold",
            account=account,
            native_in=native_in,
            foreign_out=outcome.amount_out,
            fee=outcome.fee,
        )
        return outcome

    def unwind_bucket(
        self, caller: str, bucket_id: str, lp_amount: int, destination: str
    ) -> UnwindOutcome:
        """Withdraw part of a bucket's liquidity to ``destination``.

        Raises:
            Unauthorized: If caller is not the configured authority
            BucketLocked: If bucket_id is the primary bucket
        """
        if caller != self.authority:
            raise Unauthorized(f"{caller} may not unwind treasury liquidity")
        with self._atomic("unwind_bucket") as batch:
            outcome = self.allocator.unwind(bucket_id, lp_amount)
            self.circulating_native += outcome.native_out
            self.foreign_held -= outcome.foreign_out
            batch.credit(destination, Asset.NATIVE, outcome.native_out)
            batch.credit(destination, Asset.FOREIGN, outcome.foreign_out)
        return outcome

    def process_pending(self, budget: int | None = None) -> CycleReport:
        """Run one budget-bounded cycle of deferred work."""
        with self._atomic("process_pending"):
            report = self.scheduler.run_cycle(budget)
        logger.debug(
            "pending_processed",
            serviced=report.serviced,
            deferred=report.deferred,
            budget_used=report.budget_used,
        )
        return report

    # --- Invariants and views ---

    def check_conservation(self) -> None:
        """Verify supply, foreign and LP accounting.

        Raises:
            ConservationViolation: If any ledger of value disagrees
        """
        held_native = (
            self.circulating_native
            + self.pool.reserve_native
            + self.allocator.buffer_native
            + self.fee_manager.buffer_native
        )
        if self.curve.supply != held_native:
            raise ConservationViolation(
                f"Supply {self.curve.supply} does not match native held {held_native}"
            )

        held_foreign = (
            self.pool.reserve_foreign
            + self.allocator.buffer_foreign
            + self.fee_manager.buffer_foreign
        )
        if self.foreign_held != held_foreign:
            raise ConservationViolation(
                f"Foreign received {self.foreign_held} does not match foreign held {held_foreign}"
            )

        bucket_lp = self.allocator.total_lp()
        if bucket_lp != self.pool.supply_lp:
            raise ConservationViolation(
                f"Bucket LP {bucket_lp} does not match pool LP {self.pool.supply_lp}"
            )

    def state(self) -> EngineState:
        buckets = []
        for bucket in self.allocator.buckets:
            native_value, foreign_value = self.allocator.reserves_of(bucket.id)
            buckets.append(
                BucketState(
                    id=bucket.id,
                    weight_ppm=self.allocator.weight_of(bucket.id),
                    lp_tokens=bucket.lp_tokens,
                    contributed_native=bucket.contributed_native,
                    contributed_foreign=bucket.contributed_foreign,
                    native_value=native_value,
                    foreign_value=foreign_value,
                    locked=bucket.id == self.allocator.primary_bucket_id,
                )
            )
        return EngineState(
            supply=self.curve.supply,
            curve_price=self.curve.price(),
            reserve_native=self.pool.reserve_native,
            reserve_foreign=self.pool.reserve_foreign,
            supply_lp=self.pool.supply_lp,
            spot_price=self.pool.spot_price() if self.pool.has_liquidity() else None,
            treasury_buffer_native=self.allocator.buffer_native,
            treasury_buffer_foreign=self.allocator.buffer_foreign,
            fee_buffer_native=self.fee_manager.buffer_native,
            fee_buffer_foreign=self.fee_manager.buffer_foreign,
            total_native_burned=self.fee_manager.total_native_burned,
            total_foreign_converted=self.fee_manager.total_foreign_converted,
            conversions_deferred=self.fee_manager.conversions_deferred,
            swap_count=self.router.swap_count,
            circulating_native=self.circulating_native,
            foreign_held=self.foreign_held,
            buckets=buckets,
        )


def create_system(
    config: SystemConfig | None = None,
    ledger: Ledger | None = None,
    authority: str = DEFAULT_AUTHORITY,
) -> TokenomicsEngine:
    """Build a fully wired engine (default configuration if none is given)."""
    return TokenomicsEngine(
        config=config if config is not None else DEFAULT_CONFIG,
        ledger=ledger,
        authority=authority,
    )
