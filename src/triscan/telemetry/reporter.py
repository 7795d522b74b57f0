"""
Scan reporter.

Logs every evaluated cycle and renders a boxed summary of the best
cycles after each scan.
"""

import logging
import sys
from collections.abc import Sequence
from typing import TextIO

from triscan.core.types import CycleEvaluation
from triscan.telemetry.metrics import MetricsCollector
from triscan.utils.time import format_duration_us


logger = logging.getLogger(__name__)


class ScanReporter:
    """
    Terminal reporter for scan results.

    Displays a formatted panel with:
    - Scan counters and latency
    - The best cycles of the last scan
    - The best cycle of the session
    """

    # Box drawing characters
    BOX_TL = "\u2554"  # ╔
    BOX_TR = "\u2557"  # ╗
    BOX_BL = "\u255a"  # ╚
    BOX_BR = "\u255d"  # ╝
    BOX_H = "\u2550"  # ═
    BOX_V = "\u2551"  # ║
    BOX_LT = "\u2560"  # ╠
    BOX_RT = "\u2563"  # ╣

    def __init__(
        self,
        metrics: MetricsCollector,
        reference_currency: str = "usdt",
        top: int = 10,
        width: int = 72,
        output: TextIO | None = None,
    ) -> None:
        """
        Initialize reporter.

        Args:
            metrics: Metrics collector instance.
            reference_currency: Unit of reported volumes.
            top: Cycles listed per summary.
            width: Panel width in characters.
            output: Output stream (default: stdout).
        """
        self._metrics = metrics
        self._reference = reference_currency
        self._top = top
        self._width = width
        self._output = output or sys.stdout
        self._cycle_count = 0
        self._pair_count = 0

    def set_state(self, cycle_count: int = 0, pair_count: int = 0) -> None:
        """Update catalog figures shown in the header."""
        self._cycle_count = cycle_count
        self._pair_count = pair_count

    def report_evaluation(self, evaluation: CycleEvaluation) -> None:
        """
        Log one completed evaluation.

        Args:
            evaluation: Evaluated cycle.
        """
        message = (
            f"rate={evaluation.net_rate:.6f} "
            f"max={evaluation.bottleneck_volume:.6f} {self._reference}"
        )
        context = {"cycle_id": evaluation.cycle.id}
        if evaluation.is_profitable:
            logger.info(
                f"PROFITABLE {message} profit={evaluation.profit_pct:+.4f}%", extra=context
            )
        else:
            logger.debug(message, extra=context)

    def report_failure(self, cycle_id: str, error: Exception) -> None:
        """Log a cycle skipped for this scan."""
        logger.warning(
            f"Skipped: {type(error).__name__}: {error}", extra={"cycle_id": cycle_id}
        )

    def _format_uptime(self, seconds: float) -> str:
        """Format uptime as HH:MM:SS."""
        hours, remainder = divmod(int(seconds), 3600)
        minutes, secs = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{secs:02d}"

    def _line(self, content: str) -> str:
        """Create a line with borders."""
        inner_width = self._width - 2
        return f"{self.BOX_V}{content.ljust(inner_width)[:inner_width]}{self.BOX_V}"

    def _divider(self) -> str:
        """Create a horizontal divider."""
        return f"{self.BOX_LT}{self.BOX_H * (self._width - 2)}{self.BOX_RT}"

    def render(self, evaluations: Sequence[CycleEvaluation]) -> str:
        """
        Render the summary panel for one scan.

        Args:
            evaluations: Evaluations of the scan, best first.

        Returns:
            Formatted panel.
        """
        stats = self._metrics.scan_stats
        scan_latency = self._metrics.get_latency_stats("scan")
        uptime = self._format_uptime(self._metrics.uptime_seconds)
        latency = format_duration_us(scan_latency.avg_us) if scan_latency.count else "---"

        lines = [f"{self.BOX_TL}{self.BOX_H * (self._width - 2)}{self.BOX_TR}"]
        lines.append(self._line(f"  TRIANGULAR SCAN | ref: {self._reference.upper()} | up {uptime}"))
        lines.append(self._divider())
        lines.append(
            self._line(
                f"  Pairs: {self._pair_count}  |  Cycles: {self._cycle_count}  |  "
                f"Scans: {stats.scans_completed}  |  Avg scan: {latency}"
            )
        )
        lines.append(
            self._line(
                f"  Evaluated: {stats.cycles_evaluated:,}  |  Failed: {stats.cycles_failed:,}  |  "
                f"Profitable: {stats.profitable_found:,}"
            )
        )
        lines.append(self._divider())
        lines.append(self._line(f"  {'CYCLE':<28}{'NET RATE':>12}{'PROFIT %':>11}{'MAX VOL':>17}"))

        for evaluation in evaluations[: self._top]:
            marker = "*" if evaluation.is_profitable else " "
            lines.append(
                self._line(
                    f" {marker}{evaluation.cycle.id:<28}{evaluation.net_rate:>12.6f}"
                    f"{evaluation.profit_pct:>+11.4f}{evaluation.bottleneck_volume:>17.6f}"
                )
            )

        if not evaluations:
            lines.append(self._line("  no cycle evaluated"))

        lines.append(f"{self.BOX_BL}{self.BOX_H * (self._width - 2)}{self.BOX_BR}")

        return "\n".join(lines)

    def display(self, evaluations: Sequence[CycleEvaluation]) -> None:
        """Write the panel to the output stream."""
        self._output.write(self.render(evaluations))
        self._output.write("\n")
        self._output.flush()

    def print_summary(self) -> None:
        """Print a final session summary."""
        stats = self._metrics.scan_stats
        uptime = self._format_uptime(self._metrics.uptime_seconds)

        out = self._output
        out.write("\n" + "=" * 50 + "\n")
        out.write("  SESSION SUMMARY\n")
        out.write("=" * 50 + "\n")
        out.write(f"  Uptime:            {uptime}\n")
        out.write(f"  Cycles monitored:  {self._cycle_count}\n")
        out.write(f"  Scans completed:   {stats.scans_completed:,}\n")
        out.write(f"  Evaluations:       {stats.cycles_evaluated:,}\n")
        out.write(f"  Failures:          {stats.cycles_failed:,} ({stats.failure_rate:.1%})\n")
        out.write(f"  Profitable seen:   {stats.profitable_found:,}\n")
        if stats.best_cycle_id:
            out.write(f"  Best cycle:        {stats.best_cycle_id} @ {stats.best_net_rate:.6f}\n")
        out.write("=" * 50 + "\n")
        out.flush()
