"""
Cycle evaluation engine.

Combines the three leg rates of a cycle into a net round-trip rate
and a bottleneck volume, after a fixed round-trip fee.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping

from triscan.config.constants import DEFAULT_ROUND_TRIP_FEE
from triscan.core.errors import LegFetchError, ScanError
from triscan.core.types import (
    Cycle,
    CycleEvaluation,
    DirectionalRate,
    OrderBookSnapshot,
    Pair,
)
from triscan.market.catalog import PairCatalog
from triscan.strategy.rates import RateEstimator
from triscan.utils.time import get_timestamp_us


logger = logging.getLogger(__name__)


# Fetches a fresh snapshot for a trading symbol
SnapshotFetcher = Callable[[str], Awaitable[OrderBookSnapshot]]


class CycleEvaluator:
    """
    Evaluates cycles against order book snapshots.

    The combination step is pure: identical snapshots always produce
    identical evaluations.
    """

    __slots__ = ("_estimator", "_fee")

    def __init__(
        self,
        fee: float = DEFAULT_ROUND_TRIP_FEE,
        estimator: RateEstimator | None = None,
    ) -> None:
        """
        Initialize evaluator.

        Args:
            fee: Round-trip fee subtracted from the gross rate.
            estimator: Leg rate estimator (default: top of book).
        """
        self._fee = fee
        self._estimator = estimator or RateEstimator()

    @property
    def fee(self) -> float:
        """Round-trip fee."""
        return self._fee

    @property
    def estimator(self) -> RateEstimator:
        """Leg rate estimator."""
        return self._estimator

    @staticmethod
    def resolve_pairs(cycle: Cycle, catalog: PairCatalog) -> tuple[Pair, Pair, Pair]:
        """
        Resolve the catalog pair of every leg.

        Raises:
            InsufficientLegsError: If a leg is not tradable.
        """
        leg1, leg2, leg3 = cycle.legs
        return (
            catalog.lookup_pair(*leg1),
            catalog.lookup_pair(*leg2),
            catalog.lookup_pair(*leg3),
        )

    async def evaluate(
        self,
        cycle: Cycle,
        catalog: PairCatalog,
        fetch_snapshot: SnapshotFetcher,
    ) -> CycleEvaluation:
        """
        Fetch the three leg snapshots concurrently and evaluate the cycle.

        The first failing leg cancels the fetches still in flight.

        Args:
            cycle: Cycle to evaluate.
            catalog: Pair catalog.
            fetch_snapshot: Async snapshot source.

        Returns:
            Cycle evaluation.

        Raises:
            InsufficientLegsError: If a leg is not tradable.
            LegFetchError: If a snapshot cannot be obtained.
        """
        pairs = self.resolve_pairs(cycle, catalog)

        try:
            async with asyncio.TaskGroup() as tg:
                tasks = [
                    tg.create_task(self._fetch_leg(cycle, pair, fetch_snapshot))
                    for pair in pairs
                ]
        except ExceptionGroup as group:
            leg_errors = [e for e in group.exceptions if isinstance(e, LegFetchError)]
            raise (leg_errors or group.exceptions)[0]

        snapshots = tuple(task.result() for task in tasks)
        return self._evaluate_pairs(cycle, pairs, snapshots)

    @staticmethod
    async def _fetch_leg(
        cycle: Cycle,
        pair: Pair,
        fetch_snapshot: SnapshotFetcher,
    ) -> OrderBookSnapshot:
        """Fetch one leg, wrapping provider failures."""
        try:
            return await fetch_snapshot(pair.symbol)
        except ScanError as e:
            raise LegFetchError(
                f"Cycle {cycle.id}: snapshot {pair.symbol} unavailable: {e}",
                cycle_id=cycle.id,
                symbol=pair.symbol,
            ) from e

    def evaluate_snapshots(
        self,
        cycle: Cycle,
        catalog: PairCatalog,
        snapshots: Mapping[str, OrderBookSnapshot],
    ) -> CycleEvaluation:
        """
        Evaluate a cycle from already fetched snapshots.

        Args:
            cycle: Cycle to evaluate.
            catalog: Pair catalog.
            snapshots: Snapshots keyed by trading symbol.

        Returns:
            Cycle evaluation.

        Raises:
            InsufficientLegsError: If a leg is not tradable.
            LegFetchError: If a leg's snapshot is missing.
        """
        pairs = self.resolve_pairs(cycle, catalog)

        legs: list[OrderBookSnapshot] = []
        for pair in pairs:
            snapshot = snapshots.get(pair.symbol)
            if snapshot is None:
                raise LegFetchError(
                    f"Cycle {cycle.id}: no snapshot for {pair.symbol}",
                    cycle_id=cycle.id,
                    symbol=pair.symbol,
                )
            legs.append(snapshot)

        return self._evaluate_pairs(cycle, pairs, tuple(legs))

    def _evaluate_pairs(
        self,
        cycle: Cycle,
        pairs: tuple[Pair, Pair, Pair],
        snapshots: tuple[OrderBookSnapshot, ...],
    ) -> CycleEvaluation:
        """Estimate every leg then combine."""
        rate1, rate2, rate3 = (
            self._estimator.estimate(from_currency, to_currency, snapshot, pair)
            for (from_currency, to_currency), snapshot, pair in zip(
                cycle.legs, snapshots, pairs, strict=True
            )
        )
        return self.combine(cycle, (rate1, rate2, rate3))

    def combine(
        self,
        cycle: Cycle,
        rates: tuple[DirectionalRate, DirectionalRate, DirectionalRate],
    ) -> CycleEvaluation:
        """
        Combine leg rates into a cycle evaluation.

        net = 1 / (r1 * r2 * r3) - fee
        bottleneck = min(max1, max2 * r1, max3 * r2 * r1)

        Each leg's maximum is converted into leg 1's FROM units by
        chaining through the rates of the preceding legs.

        Args:
            cycle: Evaluated cycle.
            rates: Directional rates of the three legs, in order.

        Returns:
            Cycle evaluation.
        """
        rate1, rate2, rate3 = rates

        gross_rate = 1.0 / (rate1.rate * rate2.rate * rate3.rate)
        net_rate = gross_rate - self._fee

        bottleneck = min(
            rate1.max_volume,
            rate2.max_volume * rate1.rate,
            rate3.max_volume * rate2.rate * rate1.rate,
        )

        return CycleEvaluation(
            cycle=cycle,
            rates=rates,
            gross_rate=gross_rate,
            net_rate=net_rate,
            fee=self._fee,
            bottleneck_volume=bottleneck,
            timestamp_us=get_timestamp_us(),
        )
