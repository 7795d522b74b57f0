"""Utility functions for the cycle scanner."""

from triscan.utils.time import (
    LatencyTimer,
    format_duration_us,
    get_monotonic,
    get_timestamp_us,
)


__all__ = [
    "LatencyTimer",
    "format_duration_us",
    "get_monotonic",
    "get_timestamp_us",
]
