"""Tracking coordinator wiring editor activity to the WakaTime API.

This module coordinates the heartbeat flow:
Editor Hooks → Debouncer → Project Resolver → Privacy Filter → Dispatch Queue → Sender → API

It owns the per-session state (debouncer state, project cache) and the
enabled/disabled lifecycle. Nothing here raises into the editor.
"""

from __future__ import annotations

import os
import threading
import time
from typing import Any, Callable, Dict, Mapping, Optional

from loguru import logger
from pydantic import ValidationError

from ..config.settings import WakaTimeConfig, load_config
from ..core.debouncer import HeartbeatDebouncer
from ..core.events import CursorPosition, EditorEvent, EditorEventKind, Heartbeat
from ..privacy import PrivacyOptions, apply_privacy
from ..project import ProjectResolver
from ..queuer import DispatchQueue, HeartbeatSender, QueueConfig
from ..sender import HTTPSender, SenderConfig


def queue_config_from(config: WakaTimeConfig) -> QueueConfig:
    return QueueConfig(
        max_size=config.queue_max_size,
        max_attempts=config.max_attempts,
        retry_backoff_base=config.retry_backoff_base,
        retry_backoff_max=config.retry_backoff_max,
        request_timeout=config.timeout,
    )


class TrackingCoordinator:
    """Owns one editor session's activity tracking."""

    def __init__(
        self,
        config: WakaTimeConfig,
        sender: Optional[HeartbeatSender] = None,
        wall_clock: Callable[[], float] = time.time,
    ):
        """Initialize the coordinator.

        Args:
            config: WakaTime configuration
            sender: Transport override; an ``HTTPSender`` is built from config otherwise
            wall_clock: Time source for heartbeat timestamps and debouncing
        """
        self.config = config
        self.sender: HeartbeatSender = sender or HTTPSender(SenderConfig.from_config(config))
        self._wall_clock = wall_clock
        self._lock = threading.RLock()
        self._running = False
        self._config_error_reported = False

        self.debouncer = HeartbeatDebouncer(config.debounce_window)
        self.resolver = ProjectResolver(override=config.project)
        self.privacy = PrivacyOptions.from_config(config)
        self.queue: Optional[DispatchQueue] = None

        # Statistics
        self._events_received = 0
        self._heartbeats_enqueued = 0

    def start(self) -> bool:
        """Start tracking if the configuration allows it.

        Returns:
            True if tracking is active, False otherwise
        """
        with self._lock:
            if self._running:
                logger.warning("WakaTime tracking is already running")
                return True

            if not self.config.enabled:
                logger.info("WakaTime tracking is disabled")
                return False

            is_valid, errors = self.config.validate()
            if not is_valid:
                if not self._config_error_reported:
                    logger.error(f"WakaTime tracking disabled due to configuration errors: {'; '.join(errors)}")
                    self._config_error_reported = True
                return False

            self.queue = DispatchQueue(self.sender, queue_config_from(self.config))
            self.queue.start()
            self._running = True

            logger.info(f"WakaTime tracking started - API: {self.config.api_url}")
            return True

    def stop(self) -> None:
        """Flush what can be flushed within the grace period, then discard all state."""
        with self._lock:
            if not self._running:
                return
            self._running = False
            queue, self.queue = self.queue, None

        if queue is not None:
            queue.shutdown(self.config.shutdown_grace_period)

        self.reset()
        logger.info("WakaTime tracking stopped")

    def reset(self) -> None:
        """Clear debouncer state and the project cache."""
        with self._lock:
            self.debouncer.reset()
            self.resolver.clear_cache()

    @property
    def running(self) -> bool:
        return self._running

    def update_config(self, config: WakaTimeConfig) -> None:
        """Swap configuration at runtime.

        Disabling tears tracking down; enabling starts it. Privacy, project and
        transport settings apply to heartbeats produced afterwards.
        """
        with self._lock:
            self.config = config
            self._config_error_reported = False
            self.privacy = PrivacyOptions.from_config(config)
            self.resolver.override = config.project
            self.debouncer.debounce_window = config.debounce_window

            if isinstance(self.sender, HTTPSender):
                self.sender.config = SenderConfig.from_config(config)
            if self.queue is not None:
                self.queue.config = queue_config_from(config)

            should_stop = self._running and not config.enabled
            should_start = not self._running and config.enabled

        if should_stop:
            self.stop()
        elif should_start:
            self.start()

    def handle_event(self, event: EditorEvent) -> bool:
        """Process one editor notification.

        Returns:
            True if a heartbeat was queued, False otherwise
        """
        try:
            return self._handle_event(event)
        except Exception:
            logger.exception(f"Failed to track {event.kind.value} event for {event.path}")
            return False

    def on_document_open(self, path: str, language: Optional[str] = None, cursor_position: Optional[CursorPosition] = None, lines: Optional[int] = None) -> bool:
        return self.handle_event(EditorEvent(EditorEventKind.OPEN, path, language, cursor_position, lines))

    def on_document_edit(self, path: str, language: Optional[str] = None, cursor_position: Optional[CursorPosition] = None, lines: Optional[int] = None) -> bool:
        return self.handle_event(EditorEvent(EditorEventKind.EDIT, path, language, cursor_position, lines))

    def on_cursor_move(self, path: str, language: Optional[str] = None, cursor_position: Optional[CursorPosition] = None, lines: Optional[int] = None) -> bool:
        return self.handle_event(EditorEvent(EditorEventKind.CURSOR_MOVE, path, language, cursor_position, lines))

    def get_stats(self) -> Dict[str, Any]:
        """Get statistics across all components."""
        with self._lock:
            stats: Dict[str, Any] = {
                "coordinator": {
                    "running": self._running,
                    "events_received": self._events_received,
                    "heartbeats_enqueued": self._heartbeats_enqueued,
                },
                "debouncer": self.debouncer.get_stats(),
                "resolver": self.resolver.get_stats(),
            }
            if self.queue is not None:
                stats["queue"] = self.queue.get_stats()
            if isinstance(self.sender, HTTPSender):
                stats["sender"] = self.sender.get_stats()
            return stats

    def __enter__(self) -> "TrackingCoordinator":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.stop()

    def _handle_event(self, event: EditorEvent) -> bool:
        with self._lock:
            if not self._running or self.queue is None:
                return False

            self._events_received += 1
            entity = os.path.abspath(event.path)
            now = self._wall_clock()

            if not self.debouncer.should_emit(entity, event.is_write, now):
                return False

            project = self.resolver.resolve(entity)
            heartbeat = Heartbeat(
                timestamp=now,
                entity=entity,
                is_write=event.is_write,
                project=project.name,
                language=event.language,
                cursor_position=event.cursor_position,
                lines=event.lines,
            )
            heartbeat = apply_privacy(heartbeat, self.privacy)

            queued = self.queue.enqueue(heartbeat)
            if queued:
                self._heartbeats_enqueued += 1
            return queued


def create_tracking_coordinator(section: Optional[Mapping[str, Any]] = None, sender: Optional[HeartbeatSender] = None) -> TrackingCoordinator:
    """Create and start a coordinator from the editor's ``[wakatime]`` section.

    A malformed section is reported and yields a disabled coordinator.

    Args:
        section: Raw configuration mapping with kebab-case keys
        sender: Optional transport override

    Returns:
        Coordinator, started when the configuration enables tracking
    """
    try:
        config = load_config(section)
    except ValidationError as e:
        logger.error(f"Invalid WakaTime configuration, tracking disabled: {e}")
        config = WakaTimeConfig()
        config.enabled = False

    coordinator = TrackingCoordinator(config, sender=sender)
    coordinator.start()
    return coordinator
