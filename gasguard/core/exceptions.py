"""
Custom exceptions for the GasGuard analysis engine.

Provides a hierarchy of exceptions for the configuration, detection and
dispatch phases, enabling precise error handling and clear failure reporting.
"""

from typing import List, Optional


class GasGuardError(Exception):
    """Base exception for all engine errors."""

    def __init__(self, message: str, stage: str = None, details: dict = None):
        super().__init__(message)
        self.stage = stage
        self.details = details or {}

    def __str__(self):
        base_msg = super().__str__()
        if self.stage:
            return f"[{self.stage}] {base_msg}"
        return base_msg


class ConfigurationError(GasGuardError):
    """Raised when an analyzer configuration references unknown rules or invalid values."""

    def __init__(self, errors: List[str], analyzer: Optional[str] = None):
        prefix = f"Invalid configuration for {analyzer}" if analyzer else "Invalid configuration"
        super().__init__(
            f"{prefix}: {', '.join(errors)}",
            stage="Configuration",
            details={"errors": list(errors), "analyzer": analyzer},
        )
        self.errors = list(errors)


class DetectionError(GasGuardError):
    """Raised when a single detector fails while scanning one file."""

    def __init__(self, file_path: str, message: str, rule_id: Optional[str] = None):
        super().__init__(
            message,
            stage="Detection",
            details={"file": file_path, "rule_id": rule_id},
        )
        self.file_path = file_path
        self.rule_id = rule_id


class DispatchError(GasGuardError):
    """Raised when a language or named analyzer cannot be resolved."""

    def __init__(self, message: str, details: dict = None):
        super().__init__(message, stage="Dispatch", details=details)


class UnknownLanguageError(DispatchError):
    """Raised when a language tag is not one of the supported dialects."""

    def __init__(self, tag: str):
        super().__init__(
            f"Unknown language: {tag}",
            details={"language": tag},
        )


class AnalyzerCollisionError(DispatchError):
    """Raised when an analyzer name is registered twice."""

    def __init__(self, name: str):
        super().__init__(
            f'Analyzer with name "{name}" is already registered',
            details={"analyzer": name},
        )
