"""
Main scan loop orchestrator.

Loads the pair catalog, derives the cycles and evaluates them against
fresh order book snapshots on a fixed interval until stopped.
"""

import asyncio
import logging
import signal
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager, suppress
from dataclasses import dataclass, field

from triscan.config.settings import Settings
from triscan.core.errors import ScanError
from triscan.core.types import Cycle, CycleEvaluation, MarketDataProvider, OrderBookSnapshot
from triscan.exchange.client import HuobiClient
from triscan.exchange.rate_limiter import RateLimiter
from triscan.market.catalog import PairCatalog
from triscan.strategy.evaluator import CycleEvaluator
from triscan.strategy.graph import CycleEnumerator
from triscan.strategy.rates import RateEstimator
from triscan.telemetry.logger import LogPipeline, setup_logging
from triscan.telemetry.metrics import MetricsCollector
from triscan.telemetry.reporter import ScanReporter
from triscan.utils.time import LatencyTimer, get_monotonic


logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Outcome of one scan iteration."""

    evaluations: list[CycleEvaluation] = field(default_factory=list)
    failures: dict[str, Exception] = field(default_factory=dict)
    latency_us: int = 0

    @property
    def profitable(self) -> list[CycleEvaluation]:
        """Evaluations above break-even after fees."""
        return [e for e in self.evaluations if e.is_profitable]


class CycleScanner:
    """
    Scan loop orchestrator.

    Manages the lifecycle of:
    - The market data provider
    - Catalog loading and periodic refresh
    - Concurrent cycle evaluation
    - Telemetry and reporting
    """

    def __init__(
        self,
        settings: Settings,
        provider: MarketDataProvider | None = None,
        metrics: MetricsCollector | None = None,
        reporter: ScanReporter | None = None,
        configure_logging: bool = True,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            settings: Application settings.
            provider: Market data source; a HuobiClient is created and
                owned by the scanner when omitted.
            metrics: Metrics collector (default: new instance).
            reporter: Reporter (default: ScanReporter on stdout).
            configure_logging: Install the queue-based logging pipeline.
        """
        self._settings = settings
        self._provider = provider
        self._owns_provider = provider is None
        self._configure_logging = configure_logging
        self._stop_event = asyncio.Event()
        self._running = False

        self._metrics = metrics or MetricsCollector()
        self._reporter = reporter or ScanReporter(
            metrics=self._metrics,
            reference_currency=settings.reference_currency,
            top=settings.report_top,
        )
        self._evaluator = CycleEvaluator(
            fee=settings.fee,
            estimator=RateEstimator(depth_levels=settings.depth_levels),
        )
        self._semaphore = asyncio.Semaphore(settings.max_concurrent_cycles)

        # State (initialized in setup)
        self._catalog: PairCatalog | None = None
        self._cycles: list[Cycle] = []
        self._catalog_loaded_at = 0.0
        self._log_pipeline: LogPipeline | None = None

    async def setup(self) -> None:
        """
        Create the provider, load the catalog and derive cycles.

        Raises:
            ScanError: If the catalog cannot be loaded.
        """
        if self._configure_logging and self._log_pipeline is None:
            self._log_pipeline = setup_logging(
                level=self._settings.log_level,
                log_file=self._settings.log_file,
            )

        logger.info("Initializing cycle scanner...")

        if self._provider is None:
            self._provider = HuobiClient(
                base_url=self._settings.rest_url,
                timeout=self._settings.request_timeout_seconds,
                max_retries=self._settings.max_retries,
                retry_base_delay=self._settings.retry_base_delay,
                rate_limiter=RateLimiter(self._settings.requests_per_second),
            )

        await self.load_catalog()

        logger.info("Scanner initialization complete")

    async def load_catalog(self) -> None:
        """
        (Re)load the catalog and re-derive cycles.

        Raises:
            ScanError: If the catalog cannot be loaded.
        """
        catalog = await PairCatalog.load(self.provider)

        enumerator = CycleEnumerator(catalog)
        cycles = enumerator.enumerate(
            self._settings.reference_currency,
            deduplicate=self._settings.deduplicate_cycles,
            max_cycles=self._settings.max_cycles,
        )

        self._catalog = catalog
        self._cycles = cycles
        self._catalog_loaded_at = get_monotonic()
        self._reporter.set_state(cycle_count=len(cycles), pair_count=len(catalog))

        logger.info(
            f"Monitoring {len(cycles)} cycles over {len(enumerator.symbols_for())} symbols"
        )

    async def _refresh_catalog_if_due(self) -> None:
        """Reload the catalog once the refresh interval has elapsed."""
        refresh = self._settings.catalog_refresh_seconds
        if refresh <= 0 or get_monotonic() - self._catalog_loaded_at < refresh:
            return

        try:
            await self.load_catalog()
        except ScanError as e:
            logger.error(f"Catalog refresh failed, keeping previous catalog: {e}")
            self._catalog_loaded_at = get_monotonic()

    async def _fetch_snapshot(self, symbol: str) -> OrderBookSnapshot:
        """Fetch a fresh snapshot sized for the estimator depth."""
        return await self.provider.fetch_order_book(symbol, self._settings.depth_levels)

    async def _evaluate_cycle(self, cycle: Cycle) -> CycleEvaluation | Exception:
        """
        Evaluate one cycle, returning the error instead of raising it.

        Unexpected errors are logged with their traceback and confined to
        this cycle so one bad leg never aborts the whole scan.
        """
        async with self._semaphore:
            with LatencyTimer() as timer:
                try:
                    evaluation = await self._evaluator.evaluate(
                        cycle, self.catalog, self._fetch_snapshot
                    )
                except ScanError as e:
                    return e
                except Exception as e:
                    logger.exception(
                        "Unexpected error during evaluation", extra={"cycle_id": cycle.id}
                    )
                    return e

            self._metrics.record_latency("cycle_eval", timer.latency_us)
            return evaluation

    async def scan_once(self) -> ScanResult:
        """
        Evaluate every cycle once.

        A failing cycle is logged and skipped; the others still complete.

        Returns:
            Evaluations sorted by net rate (best first) and failures by cycle id.
        """
        result = ScanResult()

        with LatencyTimer() as timer:
            outcomes = await asyncio.gather(*(self._evaluate_cycle(c) for c in self._cycles))

        for cycle, outcome in zip(self._cycles, outcomes, strict=True):
            if isinstance(outcome, Exception):
                result.failures[cycle.id] = outcome
                self._metrics.record_failure(type(outcome).__name__)
                self._reporter.report_failure(cycle.id, outcome)
            else:
                result.evaluations.append(outcome)
                self._metrics.record_evaluation(outcome)
                self._reporter.report_evaluation(outcome)

        result.evaluations.sort(key=lambda e: e.net_rate, reverse=True)
        result.latency_us = timer.latency_us
        self._metrics.record_scan(timer.latency_us)

        return result

    async def run(self, max_iterations: int | None = None, display: bool = True) -> None:
        """
        Run the scan loop until stopped.

        An in-flight scan always completes; the stop signal is honoured
        between scans.

        Args:
            max_iterations: Stop after this many scans (None = forever).
            display: Print the summary panel after each scan.
        """
        self._running = True
        self._stop_event.clear()

        loop = asyncio.get_running_loop()
        installed: list[signal.Signals] = []
        for sig in (signal.SIGINT, signal.SIGTERM):
            with suppress(NotImplementedError, RuntimeError):
                loop.add_signal_handler(sig, self.stop)
                installed.append(sig)

        iterations = 0
        try:
            logger.info(
                f"Starting scan loop (interval {self._settings.scan_interval_seconds}s)"
            )

            while not self._stop_event.is_set():
                await self._refresh_catalog_if_due()

                result = await self.scan_once()
                iterations += 1

                logger.info(
                    f"Scan {iterations}: {len(result.evaluations)} evaluated, "
                    f"{len(result.failures)} failed, {len(result.profitable)} profitable"
                )
                if display:
                    self._reporter.display(result.evaluations)

                if max_iterations is not None and iterations >= max_iterations:
                    break

                with suppress(asyncio.TimeoutError):
                    await asyncio.wait_for(
                        self._stop_event.wait(),
                        timeout=self._settings.scan_interval_seconds,
                    )

        finally:
            self._running = False
            for sig in installed:
                loop.remove_signal_handler(sig)

    def stop(self) -> None:
        """Request the scan loop to stop after the current scan."""
        logger.info("Stop requested")
        self._stop_event.set()

    async def shutdown(self) -> None:
        """Release the provider and stop logging."""
        logger.info("Shutting down scanner...")

        self._stop_event.set()
        self._reporter.print_summary()

        if self._owns_provider and isinstance(self._provider, HuobiClient):
            await self._provider.close()

        logger.info("Scanner shutdown complete")

        if self._log_pipeline:
            self._log_pipeline.stop()
            self._log_pipeline = None

    @property
    def provider(self) -> MarketDataProvider:
        """Market data provider (available after setup)."""
        if self._provider is None:
            raise RuntimeError("Scanner not set up")
        return self._provider

    @property
    def catalog(self) -> PairCatalog:
        """Loaded pair catalog (available after setup)."""
        if self._catalog is None:
            raise RuntimeError("Scanner not set up")
        return self._catalog

    @property
    def cycles(self) -> list[Cycle]:
        """Monitored cycles."""
        return list(self._cycles)

    @property
    def is_running(self) -> bool:
        """Check if the scan loop is running."""
        return self._running

    @property
    def metrics(self) -> MetricsCollector:
        """Get metrics collector."""
        return self._metrics


@asynccontextmanager
async def create_scanner(
    settings: Settings,
    provider: MarketDataProvider | None = None,
    configure_logging: bool = True,
) -> AsyncIterator[CycleScanner]:
    """
    Create and manage scanner lifecycle.

    Usage:
        async with create_scanner(settings) as scanner:
            await scanner.run()
    """
    scanner = CycleScanner(settings, provider=provider, configure_logging=configure_logging)

    try:
        await scanner.setup()
        yield scanner
    finally:
        await scanner.shutdown()
