"""Tests for router fee buffering, conversion and burning."""

import pytest

from tests.helpers import ONE, RecordingBurner, make_pool
from tokenomics.constants import PPM
from tokenomics.errors import InsufficientAmount, ValidationError
from tokenomics.fees.manager import FeeManager
from tokenomics.fees.result import ConversionOutcome, ConversionStatus

MIN_SWAP = ONE // 100


def make_manager(pool=None, min_swap_foreign=MIN_SWAP, tolerance_ppm=100_000):
    if pool is None:
        pool = make_pool(native=1_000 * ONE, foreign=100 * ONE)
    burner = RecordingBurner()
    return FeeManager(pool, burner, min_swap_foreign, tolerance_ppm), burner


class TestConversionOutcome:
    """Tests for the ConversionOutcome result type."""

    def test_converted(self):
        """Converted outcomes report what was sold and burned."""
        outcome = ConversionOutcome.converted(foreign_in=5, native_burned=40)
        assert outcome.is_converted
        assert not outcome.is_deferred
        assert outcome.buffer_foreign == 0

    def test_deferred_keeps_buffer(self):
        """Deferred outcomes carry the retained buffer and no burn."""
        outcome = ConversionOutcome.deferred(buffer_foreign=ONE, shortfall_ppm=180_000)
        assert outcome.is_deferred
        assert outcome.native_burned == 0
        assert outcome.buffer_foreign == ONE

    def test_skipped(self):
        """Skipped outcomes are neither converted nor deferred."""
        outcome = ConversionOutcome.skipped(ConversionStatus.NO_LIQUIDITY, 7)
        assert not outcome.is_converted
        assert not outcome.is_deferred


class TestNativeFees:
    """Tests for native fee handling."""

    def test_native_fee_burned_immediately(self):
        """Native fees never sit in the buffer."""
        manager, burner = make_manager()
        outcome = manager.receive_fee_native(3 * ONE)
        assert burner.burned == [3 * ONE]
        assert outcome.amount == 3 * ONE
        assert manager.buffer_native == 0
        assert manager.total_native_burned == 3 * ONE

    def test_zero_fee_burns_nothing(self):
        """An empty buffer produces no burn."""
        manager, burner = make_manager()
        assert manager.receive_fee_native(0) is None
        assert burner.burned == []

    def test_negative_fee_rejected(self):
        """Fees cannot be negative."""
        manager, _ = make_manager()
        with pytest.raises(InsufficientAmount):
            manager.receive_fee_native(-1)
        with pytest.raises(InsufficientAmount):
            manager.receive_fee_foreign(-1)


class TestForeignFees:
    """Tests for foreign fee buffering and conversion."""

    def test_below_threshold_is_buffered(self):
        """Small fees accumulate without touching the pool."""
        manager, burner = make_manager()
        outcome = manager.receive_fee_foreign(MIN_SWAP - 1)
        assert outcome.status is ConversionStatus.BELOW_THRESHOLD
        assert manager.buffer_foreign == MIN_SWAP - 1
        assert burner.burned == []
        assert not manager.has_conversion_pending()

    def test_threshold_is_inclusive(self):
        """A buffer exactly at the minimum is converted."""
        manager, _ = make_manager()
        manager.receive_fee_foreign(MIN_SWAP - 1)
        outcome = manager.receive_fee_foreign(1)
        assert outcome.is_converted
        assert outcome.foreign_in == MIN_SWAP

    def test_conversion_burns_exact_pool_output(self):
        """Converted foreign buys native at the pool quote, all of which is burned."""
        pool = make_pool(native=1_000 * ONE, foreign=100 * ONE)
        manager, burner = make_manager(pool)
        expected_out = pool.quote_native_out(5 * ONE)
        outcome = manager.receive_fee_foreign(5 * ONE)
        assert outcome.is_converted
        assert outcome.native_burned == expected_out
        assert burner.burned == [expected_out]
        assert manager.buffer_foreign == 0
        assert manager.total_foreign_converted == 5 * ONE
        assert pool.reserve_foreign == 105 * ONE

    def test_shortfall_reported(self):
        """Shortfall is the gap between spot-implied and quoted output."""
        manager, _ = make_manager()
        outcome = manager.receive_fee_foreign(5 * ONE)
        # expected 50, quoted 1000 * 5 / 105; shortfall 5 / 105
        assert outcome.shortfall_ppm == 5 * PPM // 105

    def test_no_liquidity_keeps_buffer(self):
        """Without pool liquidity the buffer waits."""
        manager, burner = make_manager(pool=make_pool())
        outcome = manager.receive_fee_foreign(ONE)
        assert outcome.status is ConversionStatus.NO_LIQUIDITY
        assert manager.buffer_foreign == ONE
        assert burner.burned == []
        assert not manager.has_conversion_pending()


class TestDeferral:
    """Tests for slippage-protected deferral."""

    def test_large_buffer_in_thin_pool_is_deferred(self):
        """A conversion that would lose more than the tolerance is held back."""
        pool = make_pool(native=1_000 * ONE, foreign=100 * ONE)
        manager, burner = make_manager(pool)
        # 20 foreign into 100: quote falls 20 / 120 (16.7%) short of spot
        outcome = manager.receive_fee_foreign(20 * ONE)
        assert outcome.is_deferred
        assert outcome.shortfall_ppm > 100_000
        assert manager.buffer_foreign == 20 * ONE
        assert manager.conversions_deferred == 1
        assert burner.burned == []
        assert (pool.reserve_native, pool.reserve_foreign) == (1_000 * ONE, 100 * ONE)

    def test_deferred_buffer_converts_once_pool_deepens(self):
        """The same buffer goes through after liquidity is added."""
        pool = make_pool(native=1_000 * ONE, foreign=100 * ONE)
        manager, burner = make_manager(pool)
        manager.receive_fee_foreign(20 * ONE)
        assert manager.has_conversion_pending()

        pool.add_liquidity(10_000 * ONE, 1_000 * ONE)
        outcome = manager.try_convert()
        assert outcome.is_converted
        assert outcome.foreign_in == 20 * ONE
        assert manager.buffer_foreign == 0
        assert burner.burned == [outcome.native_burned]
        assert manager.conversions_deferred == 1

    def test_tolerance_bounds_accepted_shortfall(self):
        """A looser tolerance accepts what a tight one defers."""
        tight, _ = make_manager(tolerance_ppm=1_000)
        loose, _ = make_manager(tolerance_ppm=500_000)
        assert tight.receive_fee_foreign(5 * ONE).is_deferred
        assert loose.receive_fee_foreign(20 * ONE).is_converted

    def test_tolerance_out_of_range(self):
        """Tolerance must be below 100%."""
        with pytest.raises(ValidationError):
            FeeManager(make_pool(), RecordingBurner(), MIN_SWAP, PPM)


class TestFeeManagerSnapshot:
    """Tests for snapshot and restore."""

    def test_restore(self):
        """Restoring brings back buffers and counters."""
        manager, _ = make_manager()
        manager.receive_fee_foreign(MIN_SWAP - 1)
        snapshot = manager.snapshot()
        manager.receive_fee_foreign(20 * ONE)
        manager.restore(snapshot)
        assert manager.buffer_foreign == MIN_SWAP - 1
        assert manager.conversions_deferred == 0
