"""Telemetry module for logging, metrics, and reporting."""

from triscan.telemetry.logger import LogPipeline, setup_logging
from triscan.telemetry.metrics import MetricsCollector
from triscan.telemetry.reporter import ScanReporter


__all__ = [
    "LogPipeline",
    "MetricsCollector",
    "ScanReporter",
    "setup_logging",
]
