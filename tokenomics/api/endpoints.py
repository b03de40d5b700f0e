"""API endpoints for the tokenomics engine."""

import os
import threading
from functools import lru_cache

import structlog
from fastapi import APIRouter, Depends

from tokenomics.api.schemas import (
    AccountResponse,
    CycleResponse,
    DepositRequest,
    ProcessRequest,
    QuoteRequest,
    QuoteResponse,
    StateResponse,
    SwapRequest,
    SwapResponse,
    UnwindRequest,
    UnwindResponse,
)
from tokenomics.config import DEFAULT_CONFIG, load_config_file
from tokenomics.engine import DEFAULT_AUTHORITY, TokenomicsEngine, create_system
from tokenomics.ledger import Asset, InMemoryLedger

logger = structlog.get_logger()

router = APIRouter()

# The engine is single-writer; every request touching it holds this lock.
_engine_lock = threading.Lock()


@lru_cache(maxsize=1)
def get_default_engine() -> TokenomicsEngine:
    """Build the process-wide engine from the environment.

    TOKENOMICS_CONFIG points to a JSON config file (defaults apply otherwise);
    TOKENOMICS_AUTHORITY names the identity allowed to unwind buckets.
    """
    config_path = os.environ.get("TOKENOMICS_CONFIG")
    config = load_config_file(config_path) if config_path else DEFAULT_CONFIG
    authority = os.environ.get("TOKENOMICS_AUTHORITY", DEFAULT_AUTHORITY)
    logger.info("engine_created", config_path=config_path, authority=authority)
    return create_system(config, InMemoryLedger(), authority=authority)


def get_engine() -> TokenomicsEngine:
    """Dependency provider for the engine instance.

    Override this in tests to inject a fresh engine:
        app.dependency_overrides[get_engine] = lambda: engine
    """
    return get_default_engine()


@router.get("/state")
def read_state(engine: TokenomicsEngine = Depends(get_engine)) -> StateResponse:
    """Current supply, pool, treasury and fee state."""
    with _engine_lock:
        return StateResponse.from_state(engine.state())


@router.get("/accounts/{account}")
def read_account(
    account: str, engine: TokenomicsEngine = Depends(get_engine)
) -> AccountResponse:
    """Ledger balances of an account."""
    with _engine_lock:
        return AccountResponse(
            account=account,
            native=engine.ledger.balance_of(account, Asset.NATIVE),
            foreign=engine.ledger.balance_of(account, Asset.FOREIGN),
        )


@router.post("/accounts/{account}/deposit")
def deposit(
    account: str,
    request: DepositRequest,
    engine: TokenomicsEngine = Depends(get_engine),
) -> AccountResponse:
    """Credit external foreign to an account."""
    with _engine_lock:
        engine.deposit_foreign(account, int(request.amount))
        return AccountResponse(
            account=account,
            native=engine.ledger.balance_of(account, Asset.NATIVE),
            foreign=engine.ledger.balance_of(account, Asset.FOREIGN),
        )


@router.post("/quote/buy")
def quote_buy(
    request: QuoteRequest, engine: TokenomicsEngine = Depends(get_engine)
) -> QuoteResponse:
    """Quote buying native with foreign; nothing is executed."""
    amount_in = int(request.amount_in)
    with _engine_lock:
        quote = engine.quote_buy(amount_in)
        return QuoteResponse.from_quote(quote, fee=engine.router.fee_for(amount_in))


@router.post("/swap/buy")
def swap_buy(request: SwapRequest, engine: TokenomicsEngine = Depends(get_engine)) -> SwapResponse:
    """Buy native with foreign from the account's balance."""
    logger.info("received_buy", account=request.account, amount_in=request.amount_in)
    with _engine_lock:
        outcome = engine.buy_native(
            request.account, int(request.amount_in), int(request.min_amount_out)
        )
    return SwapResponse.from_outcome(outcome)


@router.post("/swap/sell")
def swap_sell(request: SwapRequest, engine: TokenomicsEngine = Depends(get_engine)) -> SwapResponse:
    """Sell native for foreign from the account's balance."""
    logger.info("received_sell", account=request.account, amount_in=request.amount_in)
    with _engine_lock:
        outcome = engine.sell_native(
            request.account, int(request.amount_in), int(request.min_amount_out)
        )
    return SwapResponse.from_outcome(outcome)


@router.post("/treasury/unwind")
def unwind(
    request: UnwindRequest, engine: TokenomicsEngine = Depends(get_engine)
) -> UnwindResponse:
    """Withdraw liquidity from a treasury bucket (authority only)."""
    logger.info(
        "received_unwind",
        caller=request.caller,
        bucket_id=request.bucket_id,
        lp_amount=request.lp_amount,
    )
    with _engine_lock:
        outcome = engine.unwind_bucket(
            request.caller, request.bucket_id, int(request.lp_amount), request.destination
        )
    return UnwindResponse.from_outcome(outcome)


@router.post("/maintenance/process")
def process_pending(
    request: ProcessRequest, engine: TokenomicsEngine = Depends(get_engine)
) -> CycleResponse:
    """Run one budget-bounded cycle of deferred work."""
    with _engine_lock:
        report = engine.process_pending(request.budget)
    return CycleResponse.from_report(report)
