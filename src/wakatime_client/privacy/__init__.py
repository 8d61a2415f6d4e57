"""Privacy filtering module for the WakaTime client."""

from .privacy_filter import PrivacyOptions, apply_privacy

__all__ = ["PrivacyOptions", "apply_privacy"]
