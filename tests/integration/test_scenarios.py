"""End-to-end trading scenarios through the engine."""

import pytest

from tests.helpers import ALICE, BOB, BOOTSTRAP_FOREIGN, ONE, bootstrap, make_engine
from tokenomics.constants import PPM
from tokenomics.errors import InsufficientLiquidity
from tokenomics.ledger import Asset
from tokenomics.routing import Route

pytestmark = pytest.mark.integration


def sell_everything(engine, account):
    native = engine.ledger.balance_of(account, Asset.NATIVE)
    return engine.sell_native(account, native)


class TestBootstrap:
    """The first buy opens the pool through the mint."""

    def test_first_buy_mints_and_opens_pool(self, engine):
        """With no pool, the buy mints and the treasury share seeds liquidity."""
        outcome = bootstrap(engine)
        assert outcome.route is Route.MINT
        assert outcome.lp_minted > 0
        assert engine.allocator.total_native_deposited == outcome.treasury_share
        assert engine.allocator.total_foreign_deposited == outcome.amount_net
        state = engine.state()
        assert state.supply_lp == sum(bucket.lp_tokens for bucket in state.buckets)

    def test_bootstrap_fee_converted_and_burned(self, engine):
        """The first fee is converted as soon as the pool exists."""
        outcome = bootstrap(engine)
        state = engine.state()
        assert state.fee_buffer_foreign == 0
        assert state.total_foreign_converted == outcome.fee
        assert state.total_native_burned > 0
        assert state.supply == outcome.minted - state.total_native_burned

    def test_buyer_receives_user_share(self, engine):
        """The buyer is credited exactly the user share of the mint."""
        outcome = bootstrap(engine)
        assert engine.ledger.balance_of(ALICE, Asset.NATIVE) == outcome.amount_out
        assert outcome.amount_out == outcome.minted * 333_333 // PPM

    def test_sell_before_pool_exists(self, engine):
        """Nothing can be sold back before the first mint."""
        with pytest.raises(InsufficientLiquidity):
            engine.router.swap_native_to_foreign(ONE)


class TestClosedFormMint:
    """Mint inversion against the closed-form quadratic solution."""

    def test_minted_matches_quadratic(self):
        """price_initial=1e9, slope=1e9 and 100 foreign mint about 446.2147 native."""
        engine = make_engine(
            curve={"price_initial": 10**9, "slope": 10**9},
            router={"fee_ppm": 0},
        )
        engine.deposit_foreign(ALICE, 100 * ONE)
        outcome = engine.buy_native(ALICE, 100 * ONE)
        # m^2 / 2000 + m / 1000 = 100  =>  m = sqrt(200001) - 1
        expected = 446_214_713_500_000
        assert abs(outcome.minted - expected) * 10_000 <= expected
        assert outcome.amount_out == outcome.minted * 333_333 // PPM
        assert outcome.treasury_share == outcome.minted - outcome.amount_out


class TestRouterFee:
    """The router fee is taken once per trade."""

    def test_fee_on_thousand(self, engine):
        """1,000 foreign pays 5 in fees and routes 995."""
        outcome = bootstrap(engine)
        assert outcome.fee == 5 * ONE
        assert outcome.amount_net == 995 * ONE
        assert engine.foreign_held == BOOTSTRAP_FOREIGN

    def test_later_buys_use_cheaper_pool(self, bootstrapped_engine):
        """Once the pool prices native below the mint's user share, buys go to the pool."""
        engine = bootstrapped_engine
        engine.deposit_foreign(BOB, 10 * ONE)
        quote = engine.quote_buy(10 * ONE)
        outcome = engine.buy_native(BOB, 10 * ONE)
        assert outcome.route is quote.route is Route.POOL
        assert outcome.amount_out == quote.amount_out


class TestCircularArbitrage:
    """Round trips cannot extract foreign from the system."""

    def test_round_trips_never_profit(self, bootstrapped_engine):
        """Ten buy-then-sell cycles leave the trader no richer each time."""
        engine = bootstrapped_engine
        engine.deposit_foreign(BOB, 100 * ONE)
        balance = engine.ledger.balance_of(BOB, Asset.FOREIGN)
        for _ in range(10):
            engine.buy_native(BOB, balance)
            sell_everything(engine, BOB)
            after = engine.ledger.balance_of(BOB, Asset.FOREIGN)
            assert after <= balance
            balance = after
        assert balance < 100 * ONE


class TestFeeConversionDeferral:
    """A fee conversion through a thin pool waits until depth returns."""

    ROUND_TRIPS = 40

    def test_deferred_then_converted(self):
        """The buffer survives a thin pool and is burned once the pool deepens."""
        # Every round trip adds 5 foreign in fees while the pool returns to its
        # starting depth, so the buffer grows relative to the reserve.
        accumulated = 5 * ONE * (self.ROUND_TRIPS + 1)
        engine = make_engine(fee_manager={"min_swap_foreign": accumulated + ONE // 100})
        bootstrap(engine)
        engine.deposit_foreign(BOB, 1_500 * ONE)
        for _ in range(self.ROUND_TRIPS):
            engine.buy_native(BOB, BOOTSTRAP_FOREIGN)
            sell_everything(engine, BOB)
        assert engine.fee_manager.buffer_foreign == accumulated
        assert engine.fee_manager.conversions_deferred == 0

        # A tiny buy tips the buffer over the threshold while the pool is thin
        burned_before = engine.fee_manager.total_native_burned
        outcome = engine.buy_native(BOB, 2 * ONE)
        assert outcome.fee == ONE // 100
        assert engine.fee_manager.conversions_deferred == 1
        assert engine.fee_manager.buffer_foreign == accumulated + outcome.fee
        assert engine.fee_manager.total_native_burned == burned_before

        # Maintenance retries but the pool is still too thin
        report = engine.process_pending()
        assert "fees.foreign_conversion" in report.serviced
        assert engine.fee_manager.conversions_deferred == 2
        assert engine.fee_manager.total_native_burned == burned_before

        # A large buy deepens the pool; the buffer converts right after it
        engine.deposit_foreign(BOB, 3_000 * ONE)
        buffered = engine.fee_manager.buffer_foreign
        outcome = engine.buy_native(BOB, 3_000 * ONE)
        assert engine.fee_manager.buffer_foreign == 0
        assert engine.fee_manager.total_foreign_converted == buffered + outcome.fee
        assert engine.fee_manager.total_native_burned > burned_before
