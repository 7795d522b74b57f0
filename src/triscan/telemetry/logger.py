"""
Queue-based logging setup.

Records are handed to a QueueListener thread so console and file I/O
never block the event loop between network round trips. Records logged
with ``extra={"cycle_id": ...}`` are tagged with the cycle they concern.
"""

import logging
import sys
from datetime import datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path
from queue import Queue

from triscan.config.constants import LOG_DATE_FORMAT, LOG_FORMAT, MAX_LOG_QUEUE_SIZE


class ScanFormatter(logging.Formatter):
    """Microsecond timestamps, plus a ``[cycle]`` tag when the record has one."""

    def formatTime(self, record: logging.LogRecord, datefmt: str | None = None) -> str:
        ct = datetime.fromtimestamp(record.created)
        return f"{ct.strftime(datefmt or LOG_DATE_FORMAT)}.{ct.microsecond:06d}"

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        cycle_id = getattr(record, "cycle_id", None)
        if cycle_id is None:
            return line
        head, sep, tail = line.partition("\n")
        return f"{head} [{cycle_id}]{sep}{tail}"


class LogPipeline:
    """
    Routes one logger tree through a queue to its output handlers.

    Calls on the logger only enqueue; the listener thread writes.
    """

    def __init__(
        self,
        name: str,
        level: int = logging.INFO,
        log_file: Path | None = None,
    ) -> None:
        """
        Initialize pipeline.

        Args:
            name: Logger name the queue handler is attached to.
            level: Console level.
            log_file: Optional file receiving every record from DEBUG up.
        """
        self._level = level
        self._log_file = log_file
        self._logger = logging.getLogger(name)
        self._queue: Queue[logging.LogRecord] = Queue(maxsize=MAX_LOG_QUEUE_SIZE)
        self._queue_handler: QueueHandler | None = None
        self._listener: QueueListener | None = None

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def running(self) -> bool:
        return self._listener is not None

    def _build_handlers(self) -> list[logging.Handler]:
        formatter = ScanFormatter(LOG_FORMAT, LOG_DATE_FORMAT)

        console = logging.StreamHandler(sys.stdout)
        console.setLevel(self._level)
        handlers: list[logging.Handler] = [console]

        if self._log_file:
            self._log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self._log_file))

        for handler in handlers:
            handler.setFormatter(formatter)
        return handlers

    def start(self) -> None:
        """Attach the queue handler and start the listener thread."""
        if self.running:
            return

        # The logger passes everything; handlers filter by their own level
        self._logger.setLevel(logging.DEBUG if self._log_file else self._level)
        self._queue_handler = QueueHandler(self._queue)
        self._logger.addHandler(self._queue_handler)

        self._listener = QueueListener(
            self._queue, *self._build_handlers(), respect_handler_level=True
        )
        self._listener.start()

    def stop(self) -> None:
        """Flush pending records and detach from the logger."""
        if self._listener:
            self._listener.stop()
            self._listener = None
        if self._queue_handler:
            self._logger.removeHandler(self._queue_handler)
            self._queue_handler = None

    def __enter__(self) -> "LogPipeline":
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()


def setup_logging(level: str = "INFO", log_file: Path | None = None) -> LogPipeline:
    """
    Set up application-wide logging.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR).
        log_file: Optional log file path.

    Returns:
        Started pipeline; stop it on shutdown to flush.
    """
    numeric_level = logging.getLevelNamesMapping().get(level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    pipeline = LogPipeline("triscan", level=numeric_level, log_file=log_file)
    pipeline.start()

    # Suppress noisy third-party loggers
    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    return pipeline
