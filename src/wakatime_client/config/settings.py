"""Configuration management for the WakaTime client.

This module turns the editor's ``[wakatime]`` configuration section into a
``WakaTimeConfig`` and allows environment variable overrides.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

DEFAULT_API_URL = "https://api.wakatime.com/api/v1/users/current/heartbeats"
DEFAULT_USER_AGENT = "wakatime-client/1.0.0"


@dataclass
class LoggingConfig:
    """Configuration for log sinks."""

    level: str = "INFO"
    to_console: bool = True
    log_file: Optional[Path] = None
    rotation: str = "10 MB"
    retention: str = "7 days"


@dataclass
class WakaTimeConfig:
    """Complete WakaTime client configuration."""

    enabled: bool = False
    api_key: Optional[str] = None
    api_url: str = DEFAULT_API_URL
    project: Optional[str] = None  # Overrides project detection when set
    hide_file_names: bool = False
    hide_project_names: bool = False
    timeout: int = 30  # Per-request timeout (seconds)

    # Tuning
    debounce_window: float = 120.0
    queue_max_size: int = 1000
    max_attempts: int = 5
    retry_backoff_base: float = 1.0
    retry_backoff_max: float = 60.0
    shutdown_grace_period: float = 5.0
    auth_scheme: str = "Bearer"
    user_agent: str = DEFAULT_USER_AGENT

    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self):
        """Apply environment variable overrides."""
        self._apply_env_overrides()

    def _apply_env_overrides(self):
        """Apply configuration overrides from environment variables."""
        if enabled := os.getenv("WAKATIME_ENABLED"):
            self.enabled = enabled.strip().lower() in ("1", "true", "yes", "on")

        if api_key := os.getenv("WAKATIME_API_KEY"):
            self.api_key = api_key

        if api_url := os.getenv("WAKATIME_API_URL"):
            self.api_url = api_url

        if project := os.getenv("WAKATIME_PROJECT"):
            self.project = project

        if timeout := os.getenv("WAKATIME_TIMEOUT"):
            try:
                self.timeout = int(timeout)
            except ValueError:
                logger.warning(f"Invalid timeout: {timeout}")

        if debounce_window := os.getenv("WAKATIME_DEBOUNCE_WINDOW"):
            try:
                self.debounce_window = float(debounce_window)
            except ValueError:
                logger.warning(f"Invalid debounce window: {debounce_window}")

    def validate(self) -> tuple[bool, list[str]]:
        """Validate the configuration.

        Returns:
            Tuple of (is_valid, error_messages)
        """
        errors = []

        if self.enabled and not self.api_key:
            errors.append("API key is required when tracking is enabled")

        if not self.api_url:
            errors.append("API URL is required")

        if self.timeout <= 0:
            errors.append("Timeout must be positive")

        if self.debounce_window < 0:
            errors.append("Debounce window must not be negative")

        if self.queue_max_size <= 0:
            errors.append("Queue max size must be positive")

        if self.max_attempts <= 0:
            errors.append("Max attempts must be positive")

        if self.retry_backoff_base <= 0 or self.retry_backoff_max < self.retry_backoff_base:
            errors.append("Retry backoff must be positive and capped above its base")

        if self.auth_scheme not in ("Bearer", "Basic"):
            errors.append(f"Unsupported auth scheme: {self.auth_scheme}")

        return len(errors) == 0, errors


class EditorWakaTimeSection(BaseModel):
    """The ``[wakatime]`` section as handed over by the editor's config loader."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True, extra="forbid")

    enabled: bool = False
    api_key: Optional[str] = Field(None, alias="api-key", min_length=1)
    api_url: str = Field(DEFAULT_API_URL, alias="api-url", min_length=1)
    project: Optional[str] = Field(None, min_length=1)
    hide_file_names: bool = Field(False, alias="hide-file-names")
    hide_project_names: bool = Field(False, alias="hide-project-names")
    timeout: int = Field(30, gt=0)

    debounce_window: float = Field(120.0, alias="debounce-window", ge=0)
    queue_max_size: int = Field(1000, alias="queue-max-size", gt=0)
    max_attempts: int = Field(5, alias="max-attempts", gt=0)
    retry_backoff_base: float = Field(1.0, alias="retry-backoff-base", gt=0)
    retry_backoff_max: float = Field(60.0, alias="retry-backoff-max", gt=0)
    shutdown_grace_period: float = Field(5.0, alias="shutdown-grace-period", ge=0)
    auth_scheme: str = Field("Bearer", alias="auth-scheme", pattern=r"^(Bearer|Basic)$")
    user_agent: str = Field(DEFAULT_USER_AGENT, alias="user-agent", min_length=1)

    def to_config(self) -> WakaTimeConfig:
        """Convert the validated section into a ``WakaTimeConfig``.

        Keys present in the section win over environment overrides, which win
        over defaults.
        """
        config = WakaTimeConfig()
        for name in self.model_fields_set:
            setattr(config, name, getattr(self, name))
        return config


def load_config(section: Optional[Mapping[str, Any]] = None) -> WakaTimeConfig:
    """Build a ``WakaTimeConfig`` from the editor's raw ``[wakatime]`` section.

    Args:
        section: Mapping with kebab-case keys; ``None`` yields defaults

    Returns:
        Configured WakaTimeConfig instance

    Raises:
        pydantic.ValidationError: If the section has unknown keys or bad values
    """
    parsed = EditorWakaTimeSection.model_validate(dict(section or {}))
    return parsed.to_config()
