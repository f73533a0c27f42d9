"""Bounded-concurrency dispatcher feeding parsed events to the Aggregator.

Each input line becomes one parse task on a thread pool. A counting gate
(BoundedSemaphore) is acquired before a task is submitted and released when
it finishes, so at most ``concurrency`` tasks are ever in flight and the
pool's queue never grows with the size of the log.

Example usage:
    aggregator = Aggregator()
    dispatcher = Dispatcher(
        concurrency=20,
        threshold=resolve_threshold(parse_duration("1d")),
        aggregator=aggregator,
    )
    dispatcher.run(read_lines("/var/log/auth.log"))
    failed, accepted = aggregator.finalize(OrderBy.ATTEMPTS_DESC)
"""

from __future__ import annotations

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from datetime import datetime
from typing import Dict, Iterable, Optional

import structlog

from ssh_stat.analysis import Aggregator
from ssh_stat.exceptions import AlreadyRunError, MalformedFieldError
from ssh_stat.logs.parser import EventParser
from ssh_stat.utils.durations import is_after

logger = structlog.get_logger(__name__)

_STAT_KEYS = (
    "lines_read",
    "events_parsed",
    "events_merged",
    "events_filtered",
    "lines_skipped",
    "lines_malformed",
)


class Dispatcher:
    """One-shot parallel parser for a batch of log lines.

    Attributes:
        concurrency: Maximum number of parse tasks in flight.
        threshold: Events must be strictly after this instant to be merged.
        max_in_flight: Highest number of tasks seen in flight during run().
    """

    def __init__(
        self,
        concurrency: int,
        threshold: datetime,
        aggregator: Aggregator,
        parser: Optional[EventParser] = None,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            concurrency: Maximum parse tasks in flight (must be >= 1).
            threshold: Lower time bound; see resolve_threshold().
            aggregator: Store receiving the parsed events.
            parser: Line parser. Defaults to a new EventParser.

        Raises:
            ValueError: If concurrency is less than 1.
        """
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")

        self.concurrency = concurrency
        self.threshold = threshold
        self.max_in_flight = 0

        self._aggregator = aggregator
        self._parser = parser or EventParser()
        self._is_recent = is_after(threshold)

        self._gate = threading.BoundedSemaphore(concurrency)
        self._cancelled = threading.Event()
        self._run_lock = threading.Lock()
        self._closed = False

        self._stats_lock = threading.Lock()
        self._in_flight = 0
        self._stats: Dict[str, int] = {key: 0 for key in _STAT_KEYS}
        self._error: Optional[BaseException] = None

    @property
    def closed(self) -> bool:
        """True once run() has been called."""
        return self._closed

    @property
    def stats(self) -> Dict[str, int]:
        """Get per-line outcome counters."""
        with self._stats_lock:
            return dict(self._stats)

    def cancel(self) -> None:
        """Stop admitting new lines. Tasks already admitted still finish."""
        self._cancelled.set()

    def run(self, lines: Iterable[str]) -> None:
        """Parse all lines and merge matching events into the aggregator.

        Returns only after every admitted task has finished.

        Args:
            lines: Log lines, either a full list or a lazy line iterator.

        Raises:
            AlreadyRunError: If run() was already called on this instance.
        """
        with self._run_lock:
            if self._closed:
                raise AlreadyRunError()
            self._closed = True

        logger.info(
            "dispatch_started",
            concurrency=self.concurrency,
            threshold=self.threshold.isoformat(),
        )

        with ThreadPoolExecutor(
            max_workers=self.concurrency,
            thread_name_prefix="ssh-stat-parse",
        ) as pool:
            for line in lines:
                if self._cancelled.is_set():
                    break
                self._gate.acquire()
                if self._cancelled.is_set():
                    self._gate.release()
                    break

                self._enter()
                try:
                    future = pool.submit(self._parse_line, line)
                except BaseException:
                    self._leave()
                    raise
                future.add_done_callback(self._on_done)

        if self._cancelled.is_set():
            logger.warning("dispatch_cancelled", **self.stats)

        if self._error is not None:
            raise self._error

        logger.info("dispatch_complete", max_in_flight=self.max_in_flight, **self.stats)

    def _enter(self) -> None:
        with self._stats_lock:
            self._stats["lines_read"] += 1
            self._in_flight += 1
            if self._in_flight > self.max_in_flight:
                self.max_in_flight = self._in_flight

    def _leave(self) -> None:
        with self._stats_lock:
            self._in_flight -= 1
        self._gate.release()

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    def _on_done(self, future: Future) -> None:
        """Release the gate slot held by a finished task."""
        error = future.exception()
        if error is not None:
            logger.error(
                "line_task_failed",
                error=str(error),
                error_type=type(error).__name__,
            )
            with self._stats_lock:
                if self._error is None:
                    self._error = error
        self._leave()

    def _parse_line(self, line: str) -> None:
        """Parse one line, filter by time and merge."""
        try:
            event = self._parser.parse(line)
        except MalformedFieldError as e:
            self._count("lines_malformed")
            logger.debug(
                "line_malformed",
                field=e.field,
                value=e.value,
                line_preview=line[:100],
            )
            return

        if event is None:
            self._count("lines_skipped")
            return

        self._count("events_parsed")
        if not self._is_recent(event.timestamp):
            self._count("events_filtered")
            return

        self._aggregator.merge(event)
        self._count("events_merged")
