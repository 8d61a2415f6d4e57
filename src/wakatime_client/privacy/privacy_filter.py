"""Privacy filtering applied to heartbeats before they are queued."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict

from ..config.settings import WakaTimeConfig
from ..core.events import HIDDEN_ENTITY, Heartbeat


@dataclass(frozen=True)
class PrivacyOptions:
    """Which identifying fields to strip from outgoing heartbeats."""

    hide_file_names: bool = False
    hide_project_names: bool = False

    @classmethod
    def from_config(cls, config: WakaTimeConfig) -> "PrivacyOptions":
        return cls(hide_file_names=config.hide_file_names, hide_project_names=config.hide_project_names)


def apply_privacy(heartbeat: Heartbeat, options: PrivacyOptions) -> Heartbeat:
    """Return a copy of ``heartbeat`` with hidden fields removed.

    Hiding file names also drops cursor position and line count. Applying the
    filter to an already filtered heartbeat is a no-op.
    """
    update: Dict[str, Any] = {}

    if options.hide_file_names:
        update.update(entity=HIDDEN_ENTITY, cursor_position=None, lines=None)

    if options.hide_project_names:
        update["project"] = None

    if not update:
        return heartbeat
    return heartbeat.model_copy(update=update)
