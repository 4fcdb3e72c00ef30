"""
Utility functions and helpers.

Provides common utilities used across the codebase.
"""

from gasguard.utils.logging_config import setup_logging, get_logger
from gasguard.utils.validation import validate_path, validate_language

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_path",
    "validate_language",
]
