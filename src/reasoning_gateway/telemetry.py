"""Per-attempt telemetry sinks.

Sinks receive one TelemetryEvent per attempt outcome. Emission is
fire-and-forget from the adapter's point of view: events go through a
TelemetryDispatcher, which hands them to the sink on a background thread so
a slow sink never delays a call or stalls the event loop, and
``emit_safely`` swallows and logs any sink failure.
"""

import json
import logging
import queue
import threading
from typing import Protocol, runtime_checkable

from reasoning_gateway.types import TelemetryEvent

logger = logging.getLogger(__name__)

DEFAULT_QUEUE_SIZE = 1000


@runtime_checkable
class TelemetrySink(Protocol):
    """Receiver of per-attempt telemetry events."""

    def emit(self, event: TelemetryEvent) -> None:
        ...


class LoggingTelemetrySink:
    """Writes each event as a JSON log record."""

    def __init__(self, logger_name: str = "reasoning_gateway.telemetry.events", level: int = logging.INFO):
        self._logger = logging.getLogger(logger_name)
        self.level = level

    def emit(self, event: TelemetryEvent) -> None:
        self._logger.log(self.level, json.dumps(event.to_dict(), sort_keys=True))


class CompositeTelemetrySink:
    """Fans events out to several sinks; one failing sink does not stop the rest."""

    def __init__(self, sinks: list[TelemetrySink] | None = None):
        self.sinks = list(sinks or [])

    def add(self, sink: TelemetrySink) -> None:
        self.sinks.append(sink)

    def emit(self, event: TelemetryEvent) -> None:
        for sink in self.sinks:
            emit_safely(sink, event)


class NullTelemetrySink:
    """Discards every event."""

    def emit(self, event: TelemetryEvent) -> None:
        return None


def emit_safely(sink: TelemetrySink, event: TelemetryEvent) -> None:
    """Emit an event, logging instead of raising on sink failure."""
    try:
        sink.emit(event)
    except Exception as e:
        logger.warning(
            f"Telemetry sink {type(sink).__name__} failed for "
            f"{event.provider_id} attempt {event.attempt_index}: {e}"
        )


def estimate_cost(total_tokens: int, cost_per_1k_tokens: float) -> float:
    """Estimate call cost in USD from total tokens."""
    return round(total_tokens / 1000 * cost_per_1k_tokens, 6)


class _Flush:
    """Queue marker; set once every event queued before it was delivered."""

    def __init__(self):
        self.done = threading.Event()


_STOP = object()


class TelemetryDispatcher:
    """Delivers events to a sink from a background worker thread.

    ``submit()`` never blocks: events go onto a bounded queue and are
    dropped with a warning when the queue is full. Events are delivered in
    submission order. The worker thread is started on first submit and is a
    daemon, so an undrained queue never keeps the process alive.
    """

    def __init__(self, sink: TelemetrySink, max_queue_size: int = DEFAULT_QUEUE_SIZE):
        if max_queue_size <= 0:
            raise ValueError(f"max_queue_size must be > 0, got {max_queue_size}")
        self.sink = sink
        self._queue: queue.Queue = queue.Queue(maxsize=max_queue_size)
        self._worker: threading.Thread | None = None
        self._lock = threading.Lock()
        self._closed = False
        self.dropped = 0

    def submit(self, event: TelemetryEvent) -> None:
        """Queue an event for delivery without waiting for the sink."""
        if self._closed:
            logger.debug(f"Telemetry dispatcher closed, dropping event for {event.provider_id}")
            return
        self._ensure_worker()
        try:
            self._queue.put_nowait(event)
        except queue.Full:
            self.dropped += 1
            logger.warning(
                f"Telemetry queue full, dropped event for {event.provider_id} "
                f"attempt {event.attempt_index} ({self.dropped} dropped so far)"
            )

    def flush(self, timeout: float | None = 5.0) -> bool:
        """Block until every event submitted so far was delivered.

        Returns:
            False if the timeout expired first
        """
        if self._worker is None or not self._worker.is_alive():
            return True
        marker = _Flush()
        try:
            self._queue.put(marker, timeout=timeout)
        except queue.Full:
            return False
        return marker.done.wait(timeout)

    def close(self, timeout: float | None = 5.0) -> None:
        """Deliver pending events and stop the worker thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            worker = self._worker
        if worker is None:
            return
        try:
            self._queue.put(_STOP, timeout=timeout)
        except queue.Full:
            logger.warning("Telemetry queue still full at close; pending events abandoned")
            return
        worker.join(timeout)

    def _ensure_worker(self) -> None:
        if self._worker is not None:
            return
        with self._lock:
            if self._worker is None:
                self._worker = threading.Thread(
                    target=self._run,
                    name=f"telemetry-{type(self.sink).__name__}",
                    daemon=True,
                )
                self._worker.start()

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            if isinstance(item, _Flush):
                item.done.set()
                continue
            emit_safely(self.sink, item)
