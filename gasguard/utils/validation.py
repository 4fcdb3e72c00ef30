"""
Input validation utilities.

Provides validation functions for scan paths and language tags.
"""

import os
from pathlib import Path
from typing import Optional, Tuple

from gasguard.core.exceptions import UnknownLanguageError
from gasguard.analysis.models import Language


def validate_path(path: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a local file or directory to scan.

    Args:
        path: Path to validate.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not path:
        return False, "Path cannot be empty"

    path_obj = Path(path)

    if not path_obj.exists():
        return False, f"Path does not exist: {path}"

    if not (path_obj.is_dir() or path_obj.is_file()):
        return False, f"Path is not a file or directory: {path}"

    if not os.access(path_obj, os.R_OK):
        return False, f"Path is not readable: {path}"

    return True, None


def validate_language(tag: str) -> Tuple[bool, Optional[str]]:
    """
    Validate a language tag.

    Args:
        tag: Language name or alias.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if not tag:
        return False, "Language cannot be empty"

    try:
        Language.from_tag(tag)
    except UnknownLanguageError as e:
        return False, str(e)

    return True, None
