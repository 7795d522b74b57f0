"""
Metrics collection for scan monitoring.

Tracks latencies, counters and scan statistics with in-memory storage.
"""

import time
from collections import deque
from dataclasses import dataclass

from triscan.core.types import CycleEvaluation


@dataclass
class LatencyStats:
    """Aggregated latency statistics."""

    min_us: int = 0
    max_us: int = 0
    avg_us: float = 0.0
    p50_us: int = 0
    p95_us: int = 0
    p99_us: int = 0
    count: int = 0


@dataclass
class ScanStats:
    """Scan outcome statistics."""

    scans_completed: int = 0
    cycles_evaluated: int = 0
    cycles_failed: int = 0
    profitable_found: int = 0
    best_net_rate: float = 0.0
    best_cycle_id: str = ""

    @property
    def failure_rate(self) -> float:
        """Share of cycle evaluations that failed."""
        total = self.cycles_evaluated + self.cycles_failed
        return self.cycles_failed / total if total > 0 else 0.0


class MetricsCollector:
    """
    Collects and aggregates scan metrics.

    Features:
    - Rolling window latency tracking
    - Counter-based event tracking
    - Best cycle seen during the session
    """

    def __init__(self, latency_window_size: int = 1000) -> None:
        """
        Initialize metrics collector.

        Args:
            latency_window_size: Number of samples to keep for latency stats.
        """
        self._window_size = latency_window_size
        self._latencies: dict[str, deque[int]] = {}
        self._counters: dict[str, int] = {}
        self._scan_stats = ScanStats()
        self._start_time = time.time()

    def record_latency(self, name: str, latency_us: int) -> None:
        """
        Record a latency measurement.

        Args:
            name: Metric name (e.g., "cycle_eval", "scan").
            latency_us: Latency in microseconds.
        """
        if name not in self._latencies:
            self._latencies[name] = deque(maxlen=self._window_size)

        self._latencies[name].append(latency_us)

    def increment_counter(self, name: str, value: int = 1) -> None:
        """Increment a counter."""
        self._counters[name] = self._counters.get(name, 0) + value

    def get_counter(self, name: str) -> int:
        """Get counter value."""
        return self._counters.get(name, 0)

    def record_evaluation(self, evaluation: CycleEvaluation) -> None:
        """
        Record a completed cycle evaluation.

        Args:
            evaluation: Evaluated cycle.
        """
        stats = self._scan_stats
        stats.cycles_evaluated += 1

        if evaluation.is_profitable:
            stats.profitable_found += 1

        if evaluation.net_rate > stats.best_net_rate:
            stats.best_net_rate = evaluation.net_rate
            stats.best_cycle_id = evaluation.cycle.id

    def record_failure(self, error_type: str) -> None:
        """
        Record a failed cycle evaluation.

        Args:
            error_type: Exception class name, counted separately.
        """
        self._scan_stats.cycles_failed += 1
        self.increment_counter(f"errors.{error_type}")

    def record_scan(self, latency_us: int) -> None:
        """Record a completed scan iteration."""
        self._scan_stats.scans_completed += 1
        self.record_latency("scan", latency_us)

    def get_latency_stats(self, name: str) -> LatencyStats:
        """
        Get latency statistics for a metric.

        Args:
            name: Metric name.

        Returns:
            LatencyStats with aggregated values.
        """
        samples = self._latencies.get(name)
        if not samples:
            return LatencyStats()

        sorted_samples = sorted(samples)
        n = len(sorted_samples)

        return LatencyStats(
            min_us=sorted_samples[0],
            max_us=sorted_samples[-1],
            avg_us=sum(sorted_samples) / n,
            p50_us=sorted_samples[n // 2],
            p95_us=sorted_samples[int(n * 0.95)],
            p99_us=sorted_samples[int(n * 0.99)] if n > 1 else sorted_samples[-1],
            count=n,
        )

    def get_all_latency_stats(self) -> dict[str, LatencyStats]:
        """Get latency stats for all metrics."""
        return {name: self.get_latency_stats(name) for name in self._latencies}

    @property
    def scan_stats(self) -> ScanStats:
        """Get scan statistics."""
        return self._scan_stats

    @property
    def uptime_seconds(self) -> float:
        """Get uptime in seconds."""
        return time.time() - self._start_time

    def to_dict(self) -> dict[str, object]:
        """
        Export all metrics as a dict.

        Returns:
            Dict representation of all metrics.
        """
        return {
            "uptime_seconds": self.uptime_seconds,
            "counters": dict(self._counters),
            "latencies": {
                name: {
                    "min": stats.min_us,
                    "max": stats.max_us,
                    "avg": stats.avg_us,
                    "p50": stats.p50_us,
                    "p99": stats.p99_us,
                    "count": stats.count,
                }
                for name, stats in self.get_all_latency_stats().items()
            },
            "scans": {
                "scans_completed": self._scan_stats.scans_completed,
                "cycles_evaluated": self._scan_stats.cycles_evaluated,
                "cycles_failed": self._scan_stats.cycles_failed,
                "profitable_found": self._scan_stats.profitable_found,
                "best_net_rate": self._scan_stats.best_net_rate,
                "best_cycle_id": self._scan_stats.best_cycle_id,
            },
        }

    def reset(self) -> None:
        """Reset all metrics."""
        self._latencies.clear()
        self._counters.clear()
        self._scan_stats = ScanStats()
        self._start_time = time.time()
