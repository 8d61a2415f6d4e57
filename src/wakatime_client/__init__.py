"""WakaTime Client - Heartbeat-based activity tracking for text editors."""

from .config import WakaTimeConfig, load_config, setup_logging
from .core import CursorPosition, EditorEvent, EditorEventKind, Heartbeat
from .orchestrator import TrackingCoordinator, create_tracking_coordinator

__version__ = "1.0.0"

__all__ = [
    "TrackingCoordinator",
    "create_tracking_coordinator",
    "WakaTimeConfig",
    "load_config",
    "setup_logging",
    "Heartbeat",
    "CursorPosition",
    "EditorEvent",
    "EditorEventKind",
]
