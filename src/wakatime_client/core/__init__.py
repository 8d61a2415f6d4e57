"""Core WakaTime client components - event models and debouncing."""

from .debouncer import HeartbeatDebouncer
from .events import HIDDEN_ENTITY, Category, CursorPosition, EditorEvent, EditorEventKind, EntityType, Heartbeat

__all__ = [
    # Event architecture
    "Heartbeat",
    "CursorPosition",
    "EditorEvent",
    "EditorEventKind",
    "EntityType",
    "Category",
    "HIDDEN_ENTITY",
    # Rate limiting
    "HeartbeatDebouncer",
]
