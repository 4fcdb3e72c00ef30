"""
Source collection from the local filesystem.

The analysis core never touches the disk. This module is used by the
command-line front end to gather contract sources into the path-to-code
mapping the registry consumes.
"""

import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from gasguard.analysis.analyzer import matches_pattern
from gasguard.analysis.detector import LanguageDetector
from gasguard.core.config import ScanConfig

logger = logging.getLogger(__name__)


class SourceCollector:
    """
    Discovers and reads contract sources under files or directories.

    Applies ignore patterns, extension filtering and size limits from
    the scan configuration.
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        ignore_patterns: Optional[List[str]] = None,
    ):
        self.config = config or ScanConfig()
        self.detector = LanguageDetector(self.config.file_extensions)
        self.ignore_patterns = (
            list(ignore_patterns)
            if ignore_patterns is not None
            else list(self.config.default_exclude_paths)
        )

    def collect(self, paths: Iterable[str]) -> Dict[str, str]:
        """
        Read every supported source file under the given paths.

        Explicitly named files are always read when their extension is
        known; ignore patterns only apply to directory traversal.

        Returns:
            Mapping of file path to source text, in discovery order.
        """
        sources: Dict[str, str] = {}

        for path in paths:
            path = Path(path)
            if path.is_file():
                self._read_into(path, sources)
                continue

            for root, dirs, filenames in os.walk(path):
                current = Path(root)
                dirs[:] = sorted(
                    d for d in dirs if not self._should_ignore(current / d)
                )
                for filename in sorted(filenames):
                    file_path = current / filename
                    if self._should_ignore(file_path):
                        continue
                    self._read_into(file_path, sources)

        logger.debug(f"Collected {len(sources)} source files")
        return sources

    def _should_ignore(self, path: Path) -> bool:
        return any(
            matches_pattern(path.as_posix(), pattern)
            for pattern in self.ignore_patterns
        )

    def _read_into(self, file_path: Path, sources: Dict[str, str]) -> None:
        if self.detector.detect_file_language(str(file_path)).language is None:
            return

        content = self._read_file_content(file_path)
        if content:
            sources[file_path.as_posix()] = content

    def _read_file_content(self, file_path: Path) -> Optional[str]:
        """Safely read file content, honoring size and line limits."""
        try:
            size = file_path.stat().st_size
            if size > self.config.max_file_size:
                logger.debug(
                    f"Skipping large file: {file_path} ({size / 1024:.1f} KB)"
                )
                return None

            with open(file_path, "r", encoding="utf-8", errors="replace") as f:
                content = f.read()

        except (IOError, OSError) as e:
            logger.warning(f"Failed to read {file_path}: {e}")
            return None

        max_lines = self.config.max_lines_per_file
        if max_lines > 0:
            lines = content.split("\n")
            if len(lines) > max_lines:
                logger.debug(
                    f"Truncating {file_path}: {len(lines)} -> {max_lines} lines"
                )
                content = "\n".join(lines[:max_lines])

        return content
