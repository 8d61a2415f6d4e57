"""HTTP transport module for sending heartbeats to the WakaTime API."""

from .http_sender import HTTPSender, SenderConfig, SendResult, is_retryable_status

__all__ = ["HTTPSender", "SenderConfig", "SendResult", "is_retryable_status"]
