"""Heartbeat queuing and background delivery for the WakaTime client."""

from .dispatch_queue import DispatchQueue, HeartbeatSender, QueueConfig, QueueEntry

__all__ = ["DispatchQueue", "HeartbeatSender", "QueueConfig", "QueueEntry"]
