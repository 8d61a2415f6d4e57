"""Event models for the WakaTime client.

Editor notifications arrive as ``EditorEvent`` values; accepted ones become
immutable ``Heartbeat`` values that flow through the client pipeline:
Editor Hooks → Debouncer → Project Resolver → Privacy Filter → Queue → Sender → API
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

HIDDEN_ENTITY = "HIDDEN"


class EntityType(str, Enum):
    """What a heartbeat's entity refers to."""

    FILE = "file"
    DOMAIN = "domain"
    APP = "app"


class Category(str, Enum):
    """Activity category reported alongside a heartbeat."""

    CODING = "coding"
    BUILDING = "building"
    INDEXING = "indexing"
    DEBUGGING = "debugging"
    RUNNING = "running"
    TESTING = "testing"
    MANUAL = "manual"
    WRITING = "writing"
    DESIGNING = "designing"
    RESEARCHING = "researching"


class EditorEventKind(str, Enum):
    """Editor notifications the client listens to."""

    OPEN = "open"
    EDIT = "edit"
    CURSOR_MOVE = "cursor_move"


class CursorPosition(BaseModel):
    """Zero-based cursor location inside a document."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    line: int = Field(..., ge=0, description="Zero-based line index")
    column: int = Field(..., ge=0, description="Zero-based column index")


class Heartbeat(BaseModel):
    """One timestamped activity record sent to the tracking endpoint."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    timestamp: float = Field(default_factory=time.time, description="Seconds since epoch")
    entity: str = Field(..., min_length=1, description="Absolute file path or the HIDDEN sentinel")
    entity_type: EntityType = EntityType.FILE
    category: Category = Category.CODING
    is_write: bool = False
    project: Optional[str] = None
    language: Optional[str] = None
    cursor_position: Optional[CursorPosition] = None
    lines: Optional[int] = Field(None, ge=0)

    def to_payload(self) -> Dict[str, Any]:
        """Convert to the JSON body expected by the heartbeats endpoint.

        Absent fields are omitted rather than sent as null.
        """
        payload: Dict[str, Any] = {
            "entity": self.entity,
            "type": self.entity_type.value,
            "category": self.category.value,
            "time": self.timestamp,
            "is_write": self.is_write,
        }
        if self.project is not None:
            payload["project"] = self.project
        if self.language is not None:
            payload["language"] = self.language
        if self.lines is not None:
            payload["lines"] = self.lines
        if self.cursor_position is not None:
            payload["lineno"] = self.cursor_position.line + 1
            payload["cursorpos"] = self.cursor_position.column + 1
        return payload


@dataclass(frozen=True)
class EditorEvent:
    """A notification from the editor about activity in a document."""

    kind: EditorEventKind
    path: str
    language: Optional[str] = None
    cursor_position: Optional[CursorPosition] = None
    lines: Optional[int] = None

    @property
    def is_write(self) -> bool:
        """Only content modifications count as writes."""
        return self.kind is EditorEventKind.EDIT
