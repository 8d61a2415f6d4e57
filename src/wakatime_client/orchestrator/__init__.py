"""Tracking orchestration module for the WakaTime client."""

from .tracking_coordinator import TrackingCoordinator, create_tracking_coordinator

__all__ = ["TrackingCoordinator", "create_tracking_coordinator"]
