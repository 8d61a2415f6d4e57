"""Test doubles shared across the test suite."""

import threading
from typing import List, Optional

from wakatime_client.core.events import Heartbeat
from wakatime_client.sender import SendResult


class FakeSender:
    """Records heartbeats and replays scripted results."""

    def __init__(self, results: Optional[List[SendResult]] = None, default: SendResult = SendResult.ok(201)):
        self.results = list(results or [])
        self.default = default
        self.sent: List[Heartbeat] = []
        self._lock = threading.Lock()

    def send(self, heartbeat: Heartbeat) -> SendResult:
        with self._lock:
            self.sent.append(heartbeat)
            if self.results:
                return self.results.pop(0)
            return self.default


class HangingSender:
    """Blocks inside ``send`` until released, simulating a network hang."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.sent: List[Heartbeat] = []

    def send(self, heartbeat: Heartbeat) -> SendResult:
        self.sent.append(heartbeat)
        self.started.set()
        self.release.wait(timeout=10)
        return SendResult.ok(201)
