"""Project detection module for the WakaTime client."""

from .resolver import PROJECT_INDICATORS, ProjectInfo, ProjectResolver

__all__ = ["ProjectResolver", "ProjectInfo", "PROJECT_INDICATORS"]
