"""
Pytest configuration and shared fixtures.

Provides reusable test fixtures for all test modules.
"""

import os

import pytest

from triscan.config.settings import Settings
from triscan.core.types import Cycle, OrderBookSnapshot, Pair
from triscan.market.catalog import PairCatalog
from triscan.strategy.evaluator import CycleEvaluator
from triscan.strategy.rates import RateEstimator
from tests.mocks.provider import MockMarketDataProvider, make_snapshot


# =============================================================================
# Pair Fixtures
# =============================================================================


@pytest.fixture
def pair_btcusdt() -> Pair:
    """BTC/USDT pair."""
    return Pair(base="btc", quote="usdt", price_precision=2, amount_precision=6)


@pytest.fixture
def pair_ethbtc() -> Pair:
    """ETH/BTC pair."""
    return Pair(base="eth", quote="btc", price_precision=6, amount_precision=4)


@pytest.fixture
def pair_ethusdt() -> Pair:
    """ETH/USDT pair."""
    return Pair(base="eth", quote="usdt", price_precision=2, amount_precision=4)


@pytest.fixture
def triangle_pairs(pair_btcusdt: Pair, pair_ethbtc: Pair, pair_ethusdt: Pair) -> list[Pair]:
    """The three pairs of the usdt/btc/eth triangle, in listing order."""
    return [pair_btcusdt, pair_ethbtc, pair_ethusdt]


@pytest.fixture
def catalog(triangle_pairs: list[Pair]) -> PairCatalog:
    """Catalog holding a single triangle."""
    return PairCatalog(triangle_pairs)


# =============================================================================
# Cycle Fixtures
# =============================================================================


@pytest.fixture
def cycle_usdt_btc_eth() -> Cycle:
    """USDT -> BTC -> ETH -> USDT."""
    return Cycle("usdt", "btc", "eth")


@pytest.fixture
def cycle_usdt_eth_btc() -> Cycle:
    """USDT -> ETH -> BTC -> USDT."""
    return Cycle("usdt", "eth", "btc")


# =============================================================================
# Order Book Fixtures
# =============================================================================


@pytest.fixture
def books() -> dict[str, OrderBookSnapshot]:
    """Consistent books for the usdt/btc/eth triangle (no arbitrage)."""
    return {
        "btcusdt": make_snapshot("btcusdt", bids=[(50000.0, 2.0)], asks=[(50010.0, 1.2)]),
        "ethbtc": make_snapshot("ethbtc", bids=[(0.06, 50.0)], asks=[(0.060012, 45.0)]),
        "ethusdt": make_snapshot("ethusdt", bids=[(3000.0, 10.0)], asks=[(3001.0, 8.0)]),
    }


@pytest.fixture
def mock_provider(
    triangle_pairs: list[Pair],
    books: dict[str, OrderBookSnapshot],
) -> MockMarketDataProvider:
    """Provider serving the triangle catalog and books."""
    return MockMarketDataProvider(pairs=triangle_pairs, books=books)


# =============================================================================
# Component Fixtures
# =============================================================================


@pytest.fixture
def estimator() -> RateEstimator:
    """Top-of-book rate estimator."""
    return RateEstimator(depth_levels=1)


@pytest.fixture
def evaluator(estimator: RateEstimator) -> CycleEvaluator:
    """Evaluator with the default 0.2% round-trip fee."""
    return CycleEvaluator(fee=0.002, estimator=estimator)


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove every TRISCAN_ variable so the process environment cannot leak in."""
    for key in list(os.environ):
        if key.upper().startswith("TRISCAN_"):
            monkeypatch.delenv(key)


@pytest.fixture
def settings(clean_env: None) -> Settings:
    """Settings built from explicit values only, tuned for fast tests."""
    return Settings(
        _env_file=None,
        reference_currency="usdt",
        scan_interval_seconds=0.0,
        catalog_refresh_seconds=0.0,
        max_retries=0,
        retry_base_delay=0.0,
        max_concurrent_cycles=4,
    )
