"""Project detection by walking up from a file to the nearest project root.

A project root is the nearest ancestor directory holding a version-control
metadata directory or a package manifest. Results are cached per directory so
that steady-state lookups never touch the filesystem.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from loguru import logger

PROJECT_INDICATORS: Tuple[str, ...] = (".git", ".hg", ".svn", "Cargo.toml", "package.json", "pyproject.toml")


@dataclass(frozen=True)
class ProjectInfo:
    """Resolved project context for a file."""

    name: Optional[str] = None
    root: Optional[Path] = None

    @classmethod
    def none(cls) -> "ProjectInfo":
        return cls()

    @property
    def found(self) -> bool:
        return self.name is not None


class ProjectResolver:
    """Resolves project name and root for file paths."""

    def __init__(self, override: Optional[str] = None, indicators: Tuple[str, ...] = PROJECT_INDICATORS):
        """Initialize the resolver.

        Args:
            override: Static project name returned for every file when set
            indicators: File or directory names marking a project root
        """
        self.override = override
        self.indicators = indicators
        self._cache: Dict[Path, ProjectInfo] = {}

        # Statistics
        self._cache_hits = 0
        self._cache_misses = 0

    def resolve(self, file_path: str | os.PathLike[str]) -> ProjectInfo:
        """Return the project containing ``file_path``."""
        if self.override:
            return ProjectInfo(name=self.override)

        start = Path(os.path.abspath(file_path)).parent

        cached = self._cache.get(start)
        if cached is not None:
            self._cache_hits += 1
            return cached
        self._cache_misses += 1

        visited: List[Path] = []
        result = ProjectInfo.none()
        current = start

        while True:
            known = self._cache.get(current)
            if known is not None:
                result = known
                break

            visited.append(current)
            if self._has_indicator(current):
                result = ProjectInfo(name=current.name or str(current), root=current)
                break

            parent = current.parent
            if parent == current:
                break
            current = parent

        for directory in visited:
            self._cache[directory] = result

        if result.found:
            logger.debug(f"Resolved project {result.name!r} at {result.root} for {file_path}")
        else:
            logger.debug(f"No project found for {file_path}")

        return result

    def clear_cache(self) -> None:
        self._cache.clear()

    def cache_size(self) -> int:
        return len(self._cache)

    def get_stats(self) -> Dict[str, Any]:
        return {
            "override": self.override,
            "cached_directories": len(self._cache),
            "cache_hits": self._cache_hits,
            "cache_misses": self._cache_misses,
        }

    def _has_indicator(self, directory: Path) -> bool:
        """Check a single directory for any project indicator.

        Filesystem errors count as the indicator being absent.
        """
        for indicator in self.indicators:
            try:
                if (directory / indicator).exists():
                    return True
            except OSError as e:
                logger.debug(f"Could not check {directory / indicator}: {e}")
        return False
