"""Pytest configuration and fixtures."""

import pytest

from tests.helpers import ALICE, BOOTSTRAP_FOREIGN, ONE, bootstrap, make_engine, make_pool
from tokenomics.amm.constant_product import ConstantProductPool
from tokenomics.engine import TokenomicsEngine


@pytest.fixture
def pool() -> ConstantProductPool:
    """Fee-free pool holding 1,000 native against 100 foreign (spot 0.1)."""
    return make_pool(native=1_000 * ONE, foreign=100 * ONE)


@pytest.fixture
def fee_pool() -> ConstantProductPool:
    """Pool with a 0.3% input fee, 1,000 native against 100 foreign."""
    return make_pool(native=1_000 * ONE, foreign=100 * ONE, fee_ppm=3_000)


@pytest.fixture
def engine() -> TokenomicsEngine:
    """Fresh engine with default configuration and an empty pool."""
    return make_engine()


@pytest.fixture
def bootstrapped_engine() -> TokenomicsEngine:
    """Engine whose pool was seeded by a first 1,000-foreign buy from alice."""
    engine = make_engine()
    bootstrap(engine, ALICE, BOOTSTRAP_FOREIGN)
    return engine
