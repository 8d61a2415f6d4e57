"""In-memory dispatch queue for the WakaTime client.

This module buffers filtered heartbeats and delivers them from a background
thread, so the editing path never waits on the network. Failed deliveries are
retried with exponential backoff up to a bounded number of attempts; the
buffer is bounded too and evicts its oldest entries on overflow.
"""

from __future__ import annotations

import threading
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Protocol

from loguru import logger

from ..core.events import Heartbeat
from ..sender import SendResult


class HeartbeatSender(Protocol):
    """Protocol for the transport used by the queue."""

    def send(self, heartbeat: Heartbeat) -> SendResult:
        """Deliver one heartbeat."""
        ...


@dataclass
class QueueConfig:
    """Configuration for the dispatch queue."""

    max_size: int = 1000  # Maximum entries held in memory
    max_attempts: int = 5  # Delivery attempts before an entry is dropped
    retry_backoff_base: float = 1.0  # First retry delay (seconds)
    retry_backoff_max: float = 60.0  # Upper bound for any retry delay
    request_timeout: float = 30.0  # Bound for an in-flight request at shutdown
    idle_wait_seconds: float = 1.0  # Longest sleep between checks for due entries


@dataclass
class QueueEntry:
    """A heartbeat waiting for delivery."""

    heartbeat: Heartbeat
    enqueued_at: float
    attempts: int = 0
    next_attempt_at: float = 0.0  # 0.0 means due immediately
    last_error: str = ""

    def is_due(self, now: float) -> bool:
        return self.next_attempt_at <= now


class DispatchQueue:
    """Thread-safe bounded buffer drained by a background delivery thread."""

    def __init__(
        self,
        sender: HeartbeatSender,
        config: QueueConfig = QueueConfig(),
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the dispatch queue.

        Args:
            sender: Transport used to deliver heartbeats
            config: Queue configuration
            clock: Monotonic time source used for retry scheduling
        """
        self.sender = sender
        self.config = config
        self._clock = clock

        self._buffer: deque[QueueEntry] = deque()
        self._lock = threading.RLock()
        self._not_empty = threading.Condition(self._lock)
        self._drain_thread: Optional[threading.Thread] = None
        self._running = False
        self._accepting = True
        self._flush_deadline: Optional[float] = None

        # Statistics
        self._total_enqueued = 0
        self._total_delivered = 0
        self._total_retries = 0
        self._total_dropped_overflow = 0
        self._total_dropped_failed = 0
        self._total_dropped_permanent = 0
        self._total_dropped_shutdown = 0

    def start(self) -> None:
        """Start the background delivery thread."""
        with self._lock:
            if self._running:
                logger.warning("Dispatch queue is already running")
                return
            if not self._accepting:
                logger.warning("Dispatch queue was shut down, not restarting")
                return

            self._running = True
            self._drain_thread = threading.Thread(target=self._drain_loop, daemon=True, name="wakatime-dispatch")
            self._drain_thread.start()
            logger.info("Started heartbeat dispatch queue")

    def enqueue(self, heartbeat: Heartbeat) -> bool:
        """Add a heartbeat to the buffer without waiting on delivery.

        Args:
            heartbeat: Filtered heartbeat to deliver

        Returns:
            True if buffered, False if the queue has been shut down
        """
        with self._lock:
            if not self._accepting:
                logger.warning("Dispatch queue is shut down, dropping heartbeat")
                return False

            while self._buffer and len(self._buffer) >= self.config.max_size:
                self._evict_oldest()

            self._buffer.append(QueueEntry(heartbeat=heartbeat, enqueued_at=self._clock()))
            self._total_enqueued += 1
            self._not_empty.notify()

            logger.debug(f"Enqueued heartbeat for {heartbeat.entity}, queue size: {len(self._buffer)}")
            return True

    def drain_once(self, now: Optional[float] = None) -> int:
        """Attempt delivery of every entry that is due.

        Args:
            now: Scheduling reference time; defaults to the queue clock

        Returns:
            Number of delivery attempts made
        """
        explicit = now is not None
        reference = now if explicit else self._clock()

        with self._lock:
            budget = len(self._buffer)

        attempts = 0
        while attempts < budget and self._accepting:
            entry = self._pop_due(reference)
            if entry is None:
                break
            self._deliver(entry, now if explicit else None)
            attempts += 1

        return attempts

    def shutdown(self, grace_period: float = 5.0) -> int:
        """Stop accepting heartbeats and make a best-effort final flush.

        Every remaining entry gets one more attempt, ignoring backoff, until
        ``grace_period`` elapses. Whatever is still buffered afterwards is
        dropped.

        Args:
            grace_period: Seconds allowed for the final flush

        Returns:
            Number of heartbeats dropped without delivery
        """
        with self._lock:
            if not self._accepting:
                return 0

            self._accepting = False
            self._flush_deadline = self._clock() + grace_period
            was_running = self._running
            self._running = False
            self._not_empty.notify_all()

        if was_running and self._drain_thread:
            self._drain_thread.join(timeout=grace_period + self.config.request_timeout)
            if self._drain_thread.is_alive():
                logger.warning("Dispatch thread did not finish within the grace period")
        else:
            self._flush_remaining()

        with self._lock:
            remaining = len(self._buffer)
            self._buffer.clear()
            self._total_dropped_shutdown += remaining

        if remaining:
            logger.warning(f"Dropped {remaining} undelivered heartbeats at shutdown")

        logger.info(
            f"Dispatch queue shut down. Stats - Enqueued: {self._total_enqueued}, Delivered: {self._total_delivered}, "
            f"Failed: {self._total_dropped_failed + self._total_dropped_permanent}, Overflow: {self._total_dropped_overflow}"
        )
        return remaining

    @staticmethod
    def compute_backoff(attempts: int, base: float, maximum: float) -> float:
        """Delay before the next attempt after ``attempts`` failed ones."""
        return min(base * (2 ** max(0, attempts - 1)), maximum)

    def backoff_delay(self, attempts: int) -> float:
        return self.compute_backoff(attempts, self.config.retry_backoff_base, self.config.retry_backoff_max)

    def size(self) -> int:
        """Return the current buffer size."""
        with self._lock:
            return len(self._buffer)

    def is_empty(self) -> bool:
        with self._lock:
            return len(self._buffer) == 0

    def pending_entries(self) -> List[QueueEntry]:
        """Snapshot of buffered entries in delivery order."""
        with self._lock:
            return list(self._buffer)

    @property
    def running(self) -> bool:
        return self._running

    def get_stats(self) -> Dict[str, Any]:
        """Get queue statistics."""
        with self._lock:
            return {
                "current_size": len(self._buffer),
                "max_size": self.config.max_size,
                "utilization": len(self._buffer) / self.config.max_size,
                "running": self._running,
                "accepting": self._accepting,
                "total_enqueued": self._total_enqueued,
                "total_delivered": self._total_delivered,
                "total_retries": self._total_retries,
                "total_dropped_overflow": self._total_dropped_overflow,
                "total_dropped_failed": self._total_dropped_failed,
                "total_dropped_permanent": self._total_dropped_permanent,
                "total_dropped_shutdown": self._total_dropped_shutdown,
            }

    def _drain_loop(self) -> None:
        """Main delivery loop."""
        logger.debug("Started dispatch loop")

        while True:
            with self._lock:
                while self._running and not self._has_due(self._clock()):
                    self._not_empty.wait(self._wait_timeout())
                if not self._running:
                    break

            try:
                self.drain_once()
            except Exception:
                logger.exception("Error in dispatch loop")
                time.sleep(self.config.idle_wait_seconds)

        self._flush_remaining()
        logger.debug("Dispatch loop finished")

    def _flush_remaining(self) -> None:
        """Give each remaining entry one last attempt before the deadline."""
        while self._flush_deadline is None or self._clock() < self._flush_deadline:
            with self._lock:
                if not self._buffer:
                    return
                entry = self._buffer.popleft()
            self._deliver(entry, None, final=True)

    def _deliver(self, entry: QueueEntry, now: Optional[float], final: bool = False) -> None:
        """Send one entry and settle its fate."""
        result = self._safe_send(entry.heartbeat)
        entity = entry.heartbeat.entity

        with self._lock:
            entry.attempts += 1

            if result.success:
                self._total_delivered += 1
                return

            entry.last_error = result.error

            if not result.retryable:
                self._total_dropped_permanent += 1
                logger.error(f"Dropping heartbeat for {entity}: {result.error} (not retryable)")
                return

            if final or entry.attempts >= self.config.max_attempts:
                self._total_dropped_failed += 1
                logger.error(f"Dropping heartbeat for {entity} after {entry.attempts} attempts: {result.error}")
                return

            delay = self.backoff_delay(entry.attempts)
            reference = now if now is not None else self._clock()
            entry.next_attempt_at = reference + delay
            self._total_retries += 1

            while self._buffer and len(self._buffer) >= self.config.max_size:
                self._evict_oldest()
            self._buffer.append(entry)

        logger.warning(f"Delivery attempt {entry.attempts} for {entity} failed: {result.error}. Retrying in {delay:.1f}s...")

    def _safe_send(self, heartbeat: Heartbeat) -> SendResult:
        try:
            return self.sender.send(heartbeat)
        except Exception as e:
            logger.exception("Sender raised while delivering heartbeat")
            return SendResult.transient(f"Sender error: {e}")

    def _pop_due(self, now: float) -> Optional[QueueEntry]:
        """Remove and return the oldest due entry, if any."""
        with self._lock:
            for index, entry in enumerate(self._buffer):
                if entry.is_due(now):
                    del self._buffer[index]
                    return entry
        return None

    def _has_due(self, now: float) -> bool:
        return any(entry.is_due(now) for entry in self._buffer)

    def _wait_timeout(self) -> float:
        """Time until the earliest scheduled entry, capped by the idle wait."""
        if not self._buffer:
            return self.config.idle_wait_seconds
        earliest = min(entry.next_attempt_at for entry in self._buffer)
        return max(0.0, min(earliest - self._clock(), self.config.idle_wait_seconds))

    def _evict_oldest(self) -> None:
        evicted = self._buffer.popleft()
        self._total_dropped_overflow += 1
        logger.warning(f"Dispatch queue full ({self.config.max_size}), dropped oldest heartbeat for {evicted.heartbeat.entity}")
