"""Heartbeat debouncing for editor activity.

Decides, per incoming editor event, whether it is worth a network call.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from loguru import logger


@dataclass(frozen=True)
class LastSent:
    """What was last emitted for a single file."""

    time: float
    was_write: bool


class HeartbeatDebouncer:
    """Rate-limits heartbeats per file.

    A heartbeat is emitted when:
    - the file differs from the currently active file (or was never seen),
    - the event is a write and the previous emission for the file was not,
    - or ``debounce_window`` seconds have passed since the last emission.
    """

    def __init__(self, debounce_window: float = 120.0):
        self.debounce_window = debounce_window
        self._last_sent: Dict[str, LastSent] = {}
        self._active_file: Optional[str] = None

        # Statistics
        self._total_emitted = 0
        self._total_suppressed = 0

    def should_emit(self, file_path: str, is_write: bool, now: float) -> bool:
        """Decide whether this event produces a heartbeat, recording it if so."""
        last = self._last_sent.get(file_path)

        if last is None or file_path != self._active_file:
            emit = True
        elif is_write and not last.was_write:
            emit = True
        else:
            emit = now - last.time >= self.debounce_window

        if emit:
            self._last_sent[file_path] = LastSent(time=now, was_write=is_write)
            self._active_file = file_path
            self._total_emitted += 1
        else:
            self._total_suppressed += 1
            logger.trace(f"Suppressed heartbeat for {file_path}")

        return emit

    @property
    def active_file(self) -> Optional[str]:
        return self._active_file

    def reset(self) -> None:
        """Forget every file."""
        self._last_sent.clear()
        self._active_file = None

    def get_stats(self) -> Dict[str, Any]:
        return {
            "tracked_files": len(self._last_sent),
            "active_file": self._active_file,
            "total_emitted": self._total_emitted,
            "total_suppressed": self._total_suppressed,
            "debounce_window": self.debounce_window,
        }
