"""
Language detection for source files.

Maps file extensions to Language members so callers that read files
from disk can build the per-file language map the registry expects.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from gasguard.analysis.models import Language

logger = logging.getLogger(__name__)


@dataclass
class LanguageDetectionResult:
    """Result of language detection for a file."""
    language: Optional[Language]
    method: str  # "extension", "none"


class LanguageDetector:
    """Detects contract languages from file extensions."""

    EXTENSION_MAP: Dict[str, Language] = {
        ".sol": Language.SOLIDITY,
        ".vy": Language.VYPER,
        ".vyi": Language.VYPER,
        ".rs": Language.RUST,
        ".cairo": Language.CAIRO,
        ".move": Language.MOVE,
        ".js": Language.JAVASCRIPT,
        ".mjs": Language.JAVASCRIPT,
        ".ts": Language.TYPESCRIPT,
    }

    def __init__(self, extensions: Optional[Dict[str, str]] = None):
        self.extension_map = dict(self.EXTENSION_MAP)
        for extension, tag in (extensions or {}).items():
            self.extension_map[extension.lower()] = Language.from_tag(tag)

    def detect_file_language(self, file_path: str) -> LanguageDetectionResult:
        extension = Path(file_path).suffix.lower()
        language = self.extension_map.get(extension)
        if language is None:
            return LanguageDetectionResult(language=None, method="none")
        return LanguageDetectionResult(language=language, method="extension")

    def build_language_map(self, file_paths: Iterable[str]) -> Dict[str, Language]:
        """
        Map each path with a known extension to its language.

        Paths with unknown extensions are left out, which makes the
        registry skip them.
        """
        mapping = {}
        for file_path in file_paths:
            result = self.detect_file_language(file_path)
            if result.language is not None:
                mapping[file_path] = result.language
            else:
                logger.debug(f"Unknown language for {file_path}")
        return mapping

    def get_extensions_for_language(self, language: Language) -> List[str]:
        return sorted(
            ext for ext, lang in self.extension_map.items() if lang == language
        )
