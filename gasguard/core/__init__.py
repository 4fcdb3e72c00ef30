"""
Core module containing configuration and the exception hierarchy.
"""

from gasguard.core.config import Config, EngineConfig, RegistryConfig, ScanConfig
from gasguard.core.exceptions import (
    GasGuardError,
    ConfigurationError,
    DetectionError,
    DispatchError,
    UnknownLanguageError,
    AnalyzerCollisionError,
)

__all__ = [
    "Config",
    "EngineConfig",
    "RegistryConfig",
    "ScanConfig",
    "GasGuardError",
    "ConfigurationError",
    "DetectionError",
    "DispatchError",
    "UnknownLanguageError",
    "AnalyzerCollisionError",
]
