"""
Configuration management for the GasGuard analysis engine.

Provides centralized engine configuration with sensible defaults,
loadable from JSON files and GASGUARD_-prefixed environment variables.
Per-request analyzer configuration lives in ``gasguard.analysis.models``.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional

from dotenv import load_dotenv

if TYPE_CHECKING:
    from gasguard.analysis.models import AnalyzerConfig


@dataclass
class ScanConfig:
    """Configuration for collecting source files to scan."""

    # Extension to language tag mapping, merged over the built-in map
    file_extensions: Dict[str, str] = field(default_factory=lambda: {
        ".sol": "solidity",
        ".vy": "vyper",
        ".rs": "rust",
    })

    # Patterns excluded from every scan unless overridden
    default_exclude_paths: List[str] = field(default_factory=lambda: [
        "node_modules", ".git", "target/", "lib/forge-std",
        "*.t.sol", "*.s.sol",
    ])

    # Maximum file size to scan (in bytes)
    max_file_size: int = 1024 * 1024  # 1MB

    # Maximum lines to scan per file (0 = no limit)
    max_lines_per_file: int = 10000


@dataclass
class RegistryConfig:
    """Configuration for analyzer dispatch."""

    # Worker threads used when several analyzers serve one language
    max_workers: int = 4


@dataclass
class EngineConfig:
    """Master configuration combining all engine settings."""

    scan: ScanConfig = field(default_factory=ScanConfig)
    registry: RegistryConfig = field(default_factory=RegistryConfig)

    # Default per-rule overrides, in the wire form (bool or object)
    rules: Dict[str, Any] = field(default_factory=dict)

    # Cap on reported findings (None = unlimited)
    max_findings: Optional[int] = None

    # Enable verbose logging
    verbose: bool = False

    def analyzer_config(self, **overrides) -> "AnalyzerConfig":
        """Build the default per-request AnalyzerConfig from engine settings."""
        from gasguard.analysis.models import AnalyzerConfig

        data = {
            "rules": dict(self.rules),
            "exclude_paths": list(self.scan.default_exclude_paths),
            "max_findings": self.max_findings,
        }
        data.update(overrides)
        return AnalyzerConfig(**data)


class Config:
    """
    Central configuration manager providing access to all settings.

    Supports loading from environment variables and configuration files.
    """

    _instance: Optional["Config"] = None
    _config: EngineConfig = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._config = EngineConfig()
        return cls._instance

    @classmethod
    def get(cls) -> EngineConfig:
        """Get the current engine configuration."""
        if cls._instance is None:
            cls()
        return cls._instance._config

    @classmethod
    def reset(cls) -> EngineConfig:
        """Restore defaults (mainly for testing)."""
        instance = cls()
        instance._config = EngineConfig()
        return instance._config

    @classmethod
    def load_from_file(cls, config_path: str) -> EngineConfig:
        """
        Load configuration from a JSON file.

        Args:
            config_path: Path to the configuration file.

        Returns:
            Loaded EngineConfig instance.
        """
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "r") as f:
            data = json.load(f)

        instance = cls()
        instance._config = cls._dict_to_config(data)
        return instance._config

    @classmethod
    def load_from_env(cls, dotenv_path: Optional[str] = None) -> EngineConfig:
        """
        Load configuration from environment variables.

        Variables are prefixed with GASGUARD_. A ``.env`` file is read
        first; variables already set in the environment take precedence.

        Returns:
            EngineConfig with environment overrides applied.
        """
        load_dotenv(dotenv_path)

        instance = cls()
        config = instance._config

        if os.getenv("GASGUARD_MAX_WORKERS"):
            config.registry.max_workers = int(os.getenv("GASGUARD_MAX_WORKERS"))

        if os.getenv("GASGUARD_MAX_FILE_SIZE"):
            config.scan.max_file_size = int(os.getenv("GASGUARD_MAX_FILE_SIZE"))

        if os.getenv("GASGUARD_MAX_FINDINGS"):
            config.max_findings = int(os.getenv("GASGUARD_MAX_FINDINGS"))

        if os.getenv("GASGUARD_VERBOSE"):
            config.verbose = os.getenv("GASGUARD_VERBOSE").lower() in ("true", "1", "yes")

        return config

    @staticmethod
    def _dict_to_config(data: dict) -> EngineConfig:
        """Convert a dictionary to EngineConfig."""
        config = EngineConfig()

        if "scan" in data:
            config.scan = ScanConfig(**data["scan"])

        if "registry" in data:
            config.registry = RegistryConfig(**data["registry"])

        if "rules" in data:
            config.rules = dict(data["rules"])

        if "max_findings" in data:
            config.max_findings = data["max_findings"]

        if "verbose" in data:
            config.verbose = data["verbose"]

        return config

    @classmethod
    def save_to_file(cls, config_path: str) -> None:
        """
        Save current configuration to a JSON file.

        Args:
            config_path: Path to save the configuration file.
        """
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        data = cls._config_to_dict(cls.get())

        with open(config_path, "w") as f:
            json.dump(data, f, indent=2)

    @staticmethod
    def _config_to_dict(config: EngineConfig) -> dict:
        """Convert EngineConfig to a dictionary."""
        return {
            "scan": {
                "file_extensions": config.scan.file_extensions,
                "default_exclude_paths": config.scan.default_exclude_paths,
                "max_file_size": config.scan.max_file_size,
                "max_lines_per_file": config.scan.max_lines_per_file,
            },
            "registry": {
                "max_workers": config.registry.max_workers,
            },
            "rules": config.rules,
            "max_findings": config.max_findings,
            "verbose": config.verbose,
        }
