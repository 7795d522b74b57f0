"""
Integration tests for the scan loop.

Runs the scanner end to end against the mock provider.
"""

import asyncio
import io

import pytest

from triscan.config.settings import Settings
from triscan.core.errors import FetchError, LegFetchError, ProviderError
from triscan.core.scanner import CycleScanner, create_scanner
from triscan.core.types import OrderBookSnapshot, Pair
from triscan.telemetry.metrics import MetricsCollector
from triscan.telemetry.reporter import ScanReporter
from tests.mocks.provider import MockMarketDataProvider, make_snapshot


class TestScannerIntegration:
    """Integration tests for scanner components."""

    @pytest.fixture
    def provider(
        self,
        triangle_pairs: list[Pair],
        books: dict[str, OrderBookSnapshot],
    ) -> MockMarketDataProvider:
        """Provider with two triangles sharing the ethusdt pair."""
        pairs = [*triangle_pairs, Pair("ht", "usdt"), Pair("ht", "eth")]
        books = {
            **books,
            "htusdt": make_snapshot("htusdt", bids=[(2.5, 1000.0)], asks=[(2.501, 800.0)]),
            "hteth": make_snapshot("hteth", bids=[(0.00083, 900.0)], asks=[(0.000834, 700.0)]),
        }
        return MockMarketDataProvider(pairs=pairs, books=books)

    @pytest.fixture
    def output(self) -> io.StringIO:
        return io.StringIO()

    @pytest.fixture
    def scanner(
        self,
        settings: Settings,
        provider: MockMarketDataProvider,
        output: io.StringIO,
    ) -> CycleScanner:
        metrics = MetricsCollector()
        reporter = ScanReporter(metrics, output=output)
        return CycleScanner(
            settings,
            provider=provider,
            metrics=metrics,
            reporter=reporter,
            configure_logging=False,
        )

    @pytest.mark.asyncio
    async def test_setup_derives_cycles(self, scanner: CycleScanner) -> None:
        await scanner.setup()

        assert len(scanner.catalog) == 5
        assert {c.id for c in scanner.cycles} == {
            "usdt-btc-eth",
            "usdt-eth-btc",
            "usdt-eth-ht",
            "usdt-ht-eth",
        }

    @pytest.mark.asyncio
    async def test_scan_once_evaluates_every_cycle(
        self,
        scanner: CycleScanner,
        provider: MockMarketDataProvider,
        settings: Settings,
    ) -> None:
        await scanner.setup()

        result = await scanner.scan_once()

        assert len(result.evaluations) == 4
        assert result.failures == {}
        rates = [e.net_rate for e in result.evaluations]
        assert rates == sorted(rates, reverse=True)

        # Three fresh snapshots per cycle, sized by the configured depth
        assert len(provider.book_calls) == 12
        assert all(depth == settings.depth_levels for _, depth in provider.book_calls)

        stats = scanner.metrics.scan_stats
        assert stats.scans_completed == 1
        assert stats.cycles_evaluated == 4

    @pytest.mark.asyncio
    async def test_failing_leg_does_not_affect_other_cycles(
        self,
        scanner: CycleScanner,
        provider: MockMarketDataProvider,
    ) -> None:
        await scanner.setup()
        provider.fail_symbol("htusdt")

        result = await scanner.scan_once()

        assert {e.cycle.id for e in result.evaluations} == {"usdt-btc-eth", "usdt-eth-btc"}
        assert set(result.failures) == {"usdt-eth-ht", "usdt-ht-eth"}
        assert all(isinstance(e, LegFetchError) for e in result.failures.values())
        assert scanner.metrics.get_counter("errors.LegFetchError") == 2

    @pytest.mark.asyncio
    async def test_unexpected_leg_error_is_confined_to_its_cycles(
        self,
        scanner: CycleScanner,
        provider: MockMarketDataProvider,
    ) -> None:
        """An error outside the scan hierarchy still only skips the affected cycles."""
        await scanner.setup()
        provider.fail_symbol(
            "htusdt", UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")
        )

        result = await scanner.scan_once()

        assert {e.cycle.id for e in result.evaluations} == {"usdt-btc-eth", "usdt-eth-btc"}
        assert set(result.failures) == {"usdt-eth-ht", "usdt-ht-eth"}
        assert all(isinstance(e, UnicodeDecodeError) for e in result.failures.values())
        assert scanner.metrics.get_counter("errors.UnicodeDecodeError") == 2

    @pytest.mark.asyncio
    async def test_profitable_cycle_reported_first(
        self,
        scanner: CycleScanner,
        provider: MockMarketDataProvider,
    ) -> None:
        # Rich ethbtc bid: usdt -> eth -> btc -> usdt returns about 16%
        provider.books["ethbtc"] = make_snapshot(
            "ethbtc", bids=[(0.07, 50.0)], asks=[(0.070014, 45.0)]
        )
        await scanner.setup()

        result = await scanner.scan_once()

        best = result.evaluations[0]
        assert best.cycle.id == "usdt-eth-btc"
        assert best.is_profitable
        assert result.profitable == [best]
        assert scanner.metrics.scan_stats.best_cycle_id == "usdt-eth-btc"

    @pytest.mark.asyncio
    async def test_catalog_failure_aborts_setup(
        self,
        scanner: CycleScanner,
        provider: MockMarketDataProvider,
    ) -> None:
        provider.pairs_error = ProviderError("maintenance", code="base-system-maintenance")

        with pytest.raises(ProviderError):
            await scanner.setup()

    @pytest.mark.asyncio
    async def test_run_stops_after_max_iterations(
        self,
        scanner: CycleScanner,
        output: io.StringIO,
    ) -> None:
        await scanner.setup()

        await scanner.run(max_iterations=3)

        assert scanner.metrics.scan_stats.scans_completed == 3
        assert not scanner.is_running
        assert "TRIANGULAR SCAN" in output.getvalue()

    @pytest.mark.asyncio
    async def test_stop_ends_run(self, settings: Settings, provider: MockMarketDataProvider) -> None:
        scanner = CycleScanner(
            settings.model_copy(update={"scan_interval_seconds": 0.01}),
            provider=provider,
            reporter=ScanReporter(MetricsCollector(), output=io.StringIO()),
            configure_logging=False,
        )
        await scanner.setup()

        asyncio.get_running_loop().call_later(0.05, scanner.stop)
        await asyncio.wait_for(scanner.run(display=False), timeout=5.0)

        assert not scanner.is_running
        assert scanner.metrics.scan_stats.scans_completed >= 1

    @pytest.mark.asyncio
    async def test_failed_refresh_keeps_catalog(
        self,
        settings: Settings,
        provider: MockMarketDataProvider,
    ) -> None:
        scanner = CycleScanner(
            settings.model_copy(update={"catalog_refresh_seconds": 0.001}),
            provider=provider,
            reporter=ScanReporter(MetricsCollector(), output=io.StringIO()),
            configure_logging=False,
        )
        await scanner.setup()
        catalog = scanner.catalog

        provider.pairs_error = FetchError("unreachable")
        await asyncio.sleep(0.01)
        await scanner.run(max_iterations=1, display=False)

        assert provider.pairs_calls == 2
        assert scanner.catalog is catalog
        assert scanner.metrics.scan_stats.cycles_evaluated == 4

    @pytest.mark.asyncio
    async def test_refresh_picks_up_new_pairs(
        self,
        settings: Settings,
        provider: MockMarketDataProvider,
    ) -> None:
        scanner = CycleScanner(
            settings.model_copy(update={"catalog_refresh_seconds": 0.001}),
            provider=provider,
            reporter=ScanReporter(MetricsCollector(), output=io.StringIO()),
            configure_logging=False,
        )
        await scanner.setup()

        provider.pairs = [p for p in provider.pairs if p.base != "ht"]
        await asyncio.sleep(0.01)
        await scanner.run(max_iterations=1, display=False)

        assert len(scanner.cycles) == 2

    @pytest.mark.asyncio
    async def test_create_scanner_context(
        self,
        settings: Settings,
        provider: MockMarketDataProvider,
    ) -> None:
        async with create_scanner(settings, provider=provider, configure_logging=False) as scanner:
            result = await scanner.scan_once()

        assert len(result.evaluations) == 4
