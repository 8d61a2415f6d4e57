"""Configuration module for the WakaTime client."""

from .logger_config import setup_logging
from .settings import DEFAULT_API_URL, EditorWakaTimeSection, LoggingConfig, WakaTimeConfig, load_config

__all__ = ["WakaTimeConfig", "LoggingConfig", "EditorWakaTimeSection", "DEFAULT_API_URL", "load_config", "setup_logging"]
