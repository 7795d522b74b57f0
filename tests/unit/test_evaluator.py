"""
Unit tests for CycleEvaluator.

Tests net rate and bottleneck formulas, end-to-end evaluation and
leg failure handling.
"""

import asyncio

import pytest

from triscan.core.errors import FetchError, InsufficientLegsError, LegFetchError
from triscan.core.types import BookSide, Cycle, DirectionalRate, OrderBookSnapshot, Pair
from triscan.market.catalog import PairCatalog
from triscan.strategy.evaluator import CycleEvaluator
from tests.mocks.provider import MockMarketDataProvider


def _rate(rate: float, max_volume: float) -> DirectionalRate:
    return DirectionalRate("a", "b", rate=rate, max_volume=max_volume, side=BookSide.ASK)


class TestCombine:
    """Tests for the rate combination step."""

    def test_net_rate(self, evaluator: CycleEvaluator, cycle_usdt_btc_eth: Cycle) -> None:
        evaluation = evaluator.combine(
            cycle_usdt_btc_eth, (_rate(0.99, 1.0), _rate(0.98, 1.0), _rate(1.02, 1.0))
        )

        assert evaluation.gross_rate == pytest.approx(1.0 / (0.99 * 0.98 * 1.02))
        assert evaluation.net_rate == pytest.approx(1.0085, abs=1e-4)
        assert evaluation.is_profitable

    def test_fee_subtracted_once(self, cycle_usdt_btc_eth: Cycle) -> None:
        rates = (_rate(1.0, 1.0), _rate(1.0, 1.0), _rate(1.0, 1.0))

        evaluation = CycleEvaluator(fee=0.002).combine(cycle_usdt_btc_eth, rates)

        assert evaluation.gross_rate == pytest.approx(1.0)
        assert evaluation.net_rate == pytest.approx(0.998)
        assert evaluation.fee == 0.002
        assert not evaluation.is_profitable

    def test_bottleneck(self, evaluator: CycleEvaluator, cycle_usdt_btc_eth: Cycle) -> None:
        """Leg maxima are carried back into leg 1 units through the rates."""
        evaluation = evaluator.combine(
            cycle_usdt_btc_eth, (_rate(0.5, 10.0), _rate(0.8, 5.0), _rate(1.0, 100.0))
        )

        # min(10, 5 * 0.5, 100 * 0.8 * 0.5)
        assert evaluation.bottleneck_volume == pytest.approx(2.5)

    def test_deterministic(self, evaluator: CycleEvaluator, cycle_usdt_btc_eth: Cycle) -> None:
        rates = (_rate(0.99, 3.0), _rate(0.98, 4.0), _rate(1.02, 5.0))

        first = evaluator.combine(cycle_usdt_btc_eth, rates)
        second = evaluator.combine(cycle_usdt_btc_eth, rates)

        assert first == second


class TestEvaluateSnapshots:
    """Tests for evaluation over fetched snapshots."""

    def test_end_to_end(
        self,
        evaluator: CycleEvaluator,
        catalog: PairCatalog,
        cycle_usdt_btc_eth: Cycle,
        books: dict[str, OrderBookSnapshot],
    ) -> None:
        """usdt -> btc (ask) -> eth (ask) -> usdt (bid), checked by hand."""
        evaluation = evaluator.evaluate_snapshots(cycle_usdt_btc_eth, catalog, books)

        r1, r2, r3 = evaluation.rates
        assert (r1.side, r2.side, r3.side) == (BookSide.ASK, BookSide.ASK, BookSide.BID)
        assert r1.rate == pytest.approx(50010.0, rel=1e-9)
        assert r2.rate == pytest.approx(0.060012, rel=1e-9)
        assert r3.rate == pytest.approx(1.0 / 3000.0, rel=1e-9)

        expected_gross = 3000.0 / (50010.0 * 0.060012)
        assert evaluation.gross_rate == pytest.approx(expected_gross, rel=1e-9)
        assert evaluation.net_rate == pytest.approx(expected_gross - 0.002, rel=1e-9)

        # min(60012, 2.70054 * 50010, 10 * 0.060012 * 50010)
        assert evaluation.bottleneck_volume == pytest.approx(30012.0012, rel=1e-9)
        assert not evaluation.is_profitable

    def test_reverse_direction(
        self,
        evaluator: CycleEvaluator,
        catalog: PairCatalog,
        cycle_usdt_eth_btc: Cycle,
        books: dict[str, OrderBookSnapshot],
    ) -> None:
        evaluation = evaluator.evaluate_snapshots(cycle_usdt_eth_btc, catalog, books)

        assert [r.side for r in evaluation.rates] == [BookSide.ASK, BookSide.BID, BookSide.BID]
        assert evaluation.gross_rate == pytest.approx(3000.0 / 3001.0, rel=1e-9)

    def test_missing_snapshot(
        self,
        evaluator: CycleEvaluator,
        catalog: PairCatalog,
        cycle_usdt_btc_eth: Cycle,
        books: dict[str, OrderBookSnapshot],
    ) -> None:
        del books["ethbtc"]

        with pytest.raises(LegFetchError) as exc_info:
            evaluator.evaluate_snapshots(cycle_usdt_btc_eth, catalog, books)

        assert exc_info.value.symbol == "ethbtc"
        assert exc_info.value.cycle_id == "usdt-btc-eth"

    def test_untradable_leg(
        self,
        evaluator: CycleEvaluator,
        cycle_usdt_btc_eth: Cycle,
        books: dict[str, OrderBookSnapshot],
    ) -> None:
        catalog = PairCatalog([Pair("btc", "usdt"), Pair("eth", "usdt")])

        with pytest.raises(InsufficientLegsError):
            evaluator.evaluate_snapshots(cycle_usdt_btc_eth, catalog, books)


class TestEvaluate:
    """Tests for evaluation with concurrent snapshot fetches."""

    @pytest.mark.asyncio
    async def test_fetches_every_leg(
        self,
        evaluator: CycleEvaluator,
        catalog: PairCatalog,
        cycle_usdt_btc_eth: Cycle,
        books: dict[str, OrderBookSnapshot],
        mock_provider: MockMarketDataProvider,
    ) -> None:
        evaluation = await evaluator.evaluate(
            cycle_usdt_btc_eth, catalog, mock_provider.fetch_order_book
        )

        expected = evaluator.evaluate_snapshots(cycle_usdt_btc_eth, catalog, books)
        assert evaluation == expected
        assert sorted(s for s, _ in mock_provider.book_calls) == ["btcusdt", "ethbtc", "ethusdt"]

    @pytest.mark.asyncio
    async def test_failed_leg_raises_leg_fetch_error(
        self,
        evaluator: CycleEvaluator,
        catalog: PairCatalog,
        cycle_usdt_btc_eth: Cycle,
        mock_provider: MockMarketDataProvider,
    ) -> None:
        mock_provider.fail_symbol("ethusdt")

        with pytest.raises(LegFetchError) as exc_info:
            await evaluator.evaluate(cycle_usdt_btc_eth, catalog, mock_provider.fetch_order_book)

        assert exc_info.value.symbol == "ethusdt"
        assert isinstance(exc_info.value.__cause__, FetchError)

    @pytest.mark.asyncio
    async def test_failed_leg_cancels_sibling_fetches(
        self,
        evaluator: CycleEvaluator,
        catalog: PairCatalog,
        cycle_usdt_btc_eth: Cycle,
        books: dict[str, OrderBookSnapshot],
    ) -> None:
        completed: list[str] = []
        cancelled: list[str] = []

        async def fetch(symbol: str) -> OrderBookSnapshot:
            if symbol == "btcusdt":
                await asyncio.sleep(0.01)
                raise FetchError("connection reset")
            try:
                await asyncio.sleep(0.2)
            except asyncio.CancelledError:
                cancelled.append(symbol)
                raise
            completed.append(symbol)
            return books[symbol]

        with pytest.raises(LegFetchError) as exc_info:
            await evaluator.evaluate(cycle_usdt_btc_eth, catalog, fetch)

        assert exc_info.value.symbol == "btcusdt"
        assert isinstance(exc_info.value.__cause__, FetchError)
        assert sorted(cancelled) == ["ethbtc", "ethusdt"]

        await asyncio.sleep(0.3)
        assert completed == []
