"""HTTP sender for transmitting heartbeats to the WakaTime API.

This module provides the HTTP/HTTPS transport used by the dispatch queue. It
performs exactly one request per call and classifies the outcome so that the
queue can decide between retrying and dropping.
"""

from __future__ import annotations

import base64
import json
import socket
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger

from ..config.settings import DEFAULT_API_URL, DEFAULT_USER_AGENT, WakaTimeConfig
from ..core.events import Heartbeat


@dataclass
class SenderConfig:
    """Configuration for the HTTP sender."""

    api_url: str = DEFAULT_API_URL
    api_key: str = ""
    auth_scheme: str = "Bearer"  # "Bearer" or "Basic"
    timeout_seconds: float = 30  # Request timeout
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_config(cls, config: WakaTimeConfig) -> "SenderConfig":
        return cls(
            api_url=config.api_url,
            api_key=config.api_key or "",
            auth_scheme=config.auth_scheme,
            timeout_seconds=config.timeout,
            user_agent=config.user_agent,
        )


@dataclass(frozen=True)
class SendResult:
    """Outcome of a single delivery attempt."""

    success: bool
    status_code: Optional[int] = None
    error: str = ""
    retryable: bool = False

    @classmethod
    def ok(cls, status_code: int) -> "SendResult":
        return cls(success=True, status_code=status_code)

    @classmethod
    def transient(cls, error: str, status_code: Optional[int] = None) -> "SendResult":
        return cls(success=False, status_code=status_code, error=error, retryable=True)

    @classmethod
    def permanent(cls, error: str, status_code: Optional[int] = None) -> "SendResult":
        return cls(success=False, status_code=status_code, error=error, retryable=False)


def is_retryable_status(status_code: int) -> bool:
    """Only rate limiting and server errors are worth another try."""
    return status_code == 429 or 500 <= status_code < 600


class HTTPSender:
    """HTTP sender for transmitting single heartbeats."""

    def __init__(self, config: SenderConfig = SenderConfig()):
        """Initialize the HTTP sender.

        Args:
            config: Sender configuration
        """
        self.config = config

        # Statistics
        self._total_sent = 0
        self._total_failed = 0
        self._total_send_time = 0.0
        self._last_successful_send: Optional[datetime] = None
        self._last_error: Optional[str] = None

    def send(self, heartbeat: Heartbeat) -> SendResult:
        """Send one heartbeat to the API.

        Never raises; every failure is reported through the returned result.
        """
        config = self.config
        start_time = time.time()

        try:
            result = self._send_request(config, heartbeat.to_payload())
        except Exception as e:
            result = SendResult.transient(f"Unexpected error sending heartbeat: {e}")

        self._total_send_time += time.time() - start_time

        if result.success:
            self._total_sent += 1
            self._last_successful_send = datetime.now()
            self._last_error = None
            logger.debug(f"Heartbeat sent for {heartbeat.entity} ({result.status_code})")
        else:
            self._total_failed += 1
            self._last_error = result.error

        return result

    def get_stats(self) -> Dict[str, Any]:
        """Get sender statistics.

        Returns:
            Dictionary with sender statistics
        """
        attempts = max(1, self._total_sent + self._total_failed)

        return {
            "total_sent": self._total_sent,
            "total_failed": self._total_failed,
            "success_rate": self._total_sent / attempts,
            "average_send_time_seconds": self._total_send_time / attempts,
            "last_successful_send": self._last_successful_send.isoformat() if self._last_successful_send else None,
            "last_error": self._last_error,
        }

    @staticmethod
    def _authorization_header(config: SenderConfig) -> str:
        if config.auth_scheme == "Basic":
            credential = base64.b64encode(config.api_key.encode("utf-8")).decode("ascii")
            return f"Basic {credential}"
        return f"Bearer {config.api_key}"

    def _send_request(self, config: SenderConfig, payload: Dict[str, Any]) -> SendResult:
        """Send a single HTTP request.

        Args:
            config: Sender configuration snapshot for this request
            payload: JSON payload to send

        Returns:
            Classified result of the request
        """
        req = Request(
            config.api_url,
            data=json.dumps(payload).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "Authorization": self._authorization_header(config),
                "User-Agent": config.user_agent,
            },
            method="POST",
        )

        try:
            with urlopen(req, timeout=config.timeout_seconds) as response:
                if 200 <= response.status < 300:
                    return SendResult.ok(response.status)

                error_msg = f"HTTP {response.status}: {response.reason}"
                if is_retryable_status(response.status):
                    return SendResult.transient(error_msg, response.status)
                return SendResult.permanent(error_msg, response.status)

        except HTTPError as e:
            error_msg = f"HTTP error: {e.code} {e.reason}"
            if e.code == 401:
                error_msg += " (invalid API key)"

            if is_retryable_status(e.code):
                return SendResult.transient(error_msg, e.code)
            return SendResult.permanent(error_msg, e.code)

        except (socket.timeout, TimeoutError):
            return SendResult.transient(f"Request timed out after {config.timeout_seconds}s")

        except URLError as e:
            return SendResult.transient(f"Network error: {e.reason}")

        except OSError as e:
            return SendResult.transient(f"Connection error: {e}")
