"""
Clock helpers.

Evaluations are stamped with wall-clock microseconds. Scheduling, rate
limiting and latency measurement use monotonic clocks so a system clock
adjustment never distorts an interval.
"""

import time
from typing import Final


# (microseconds per unit, suffix), largest first
_DURATION_UNITS: Final[tuple[tuple[int, str], ...]] = ((1_000_000, "s"), (1_000, "ms"))


def get_timestamp_us() -> int:
    """Wall-clock Unix time in microseconds."""
    return time.time_ns() // 1000


def get_monotonic() -> float:
    """Monotonic clock in seconds."""
    return time.monotonic()


class LatencyTimer:
    """
    Context manager timing the body of a with block.

    Example:
        >>> with LatencyTimer() as timer:
        ...     await scanner.scan_once()
        >>> metrics.record_latency("scan", timer.latency_us)
    """

    __slots__ = ("_started_ns", "latency_us")

    def __init__(self) -> None:
        self._started_ns = 0
        self.latency_us = 0

    def __enter__(self) -> "LatencyTimer":
        self._started_ns = time.perf_counter_ns()
        return self

    def __exit__(self, *args: object) -> None:
        self.latency_us = (time.perf_counter_ns() - self._started_ns) // 1000

    @property
    def latency_ms(self) -> float:
        return self.latency_us / 1000


def format_duration_us(duration_us: int | float) -> str:
    """
    Render a duration with the largest unit that fits.

    Examples:
        >>> format_duration_us(500)
        '500μs'
        >>> format_duration_us(1500)
        '1.50ms'
    """
    for scale, suffix in _DURATION_UNITS:
        if duration_us >= scale:
            return f"{duration_us / scale:.2f}{suffix}"
    return f"{duration_us:.0f}μs"
