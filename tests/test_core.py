"""
Unit tests for core module components.
"""

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from gasguard.analysis.models import AnalyzerConfig, RuleOverride
from gasguard.core.config import (
    Config,
    EngineConfig,
    RegistryConfig,
    ScanConfig,
)
from gasguard.core.exceptions import (
    AnalyzerCollisionError,
    ConfigurationError,
    DetectionError,
    DispatchError,
    GasGuardError,
    UnknownLanguageError,
)


class TestConfig(unittest.TestCase):
    """Tests for configuration management."""

    def setUp(self):
        Config.reset()

    def tearDown(self):
        Config.reset()

    def test_default_config(self):
        """Test that default configuration is created correctly."""
        config = EngineConfig()

        self.assertIsInstance(config.scan, ScanConfig)
        self.assertIsInstance(config.registry, RegistryConfig)
        self.assertEqual(config.rules, {})
        self.assertIsNone(config.max_findings)
        self.assertFalse(config.verbose)

    def test_scan_config_defaults(self):
        """Test scan configuration defaults."""
        config = ScanConfig()

        self.assertEqual(config.file_extensions[".sol"], "solidity")
        self.assertEqual(config.file_extensions[".vy"], "vyper")
        self.assertEqual(config.file_extensions[".rs"], "rust")
        self.assertIn("node_modules", config.default_exclude_paths)
        self.assertIn("*.t.sol", config.default_exclude_paths)
        self.assertEqual(config.max_file_size, 1024 * 1024)

    def test_registry_config_defaults(self):
        self.assertEqual(RegistryConfig().max_workers, 4)

    def test_singleton(self):
        self.assertIs(Config.get(), Config.get())

    def test_analyzer_config(self):
        """Test building per-request config from engine settings."""
        config = EngineConfig(rules={"sol-004": False}, max_findings=10)
        analyzer_config = config.analyzer_config()

        self.assertIsInstance(analyzer_config, AnalyzerConfig)
        self.assertIsInstance(analyzer_config.rules["sol-004"], RuleOverride)
        self.assertFalse(analyzer_config.rules["sol-004"].enabled)
        self.assertEqual(analyzer_config.max_findings, 10)
        self.assertIn("node_modules", analyzer_config.exclude_paths)

    def test_analyzer_config_overrides(self):
        analyzer_config = EngineConfig().analyzer_config(exclude_paths=["mocks/"])
        self.assertEqual(analyzer_config.exclude_paths, ["mocks/"])

    def test_config_save_and_load(self):
        """Test configuration serialization and deserialization."""
        with tempfile.TemporaryDirectory() as tmpdir:
            config_path = Path(tmpdir) / "gasguard.json"

            Config.get().rules = {"sol-001": {"severity": "critical"}}
            Config.get().registry.max_workers = 2
            Config.save_to_file(str(config_path))

            self.assertTrue(config_path.exists())

            with open(config_path) as f:
                data = json.load(f)

            self.assertIn("scan", data)
            self.assertIn("registry", data)
            self.assertEqual(data["rules"], {"sol-001": {"severity": "critical"}})

            Config.reset()
            loaded = Config.load_from_file(str(config_path))

            self.assertEqual(loaded.registry.max_workers, 2)
            self.assertEqual(loaded.rules, {"sol-001": {"severity": "critical"}})
            self.assertIs(Config.get(), loaded)

    def test_load_missing_file(self):
        with self.assertRaises(FileNotFoundError):
            Config.load_from_file("/nonexistent/gasguard.json")

    def test_load_from_env(self):
        """Test environment variable overrides."""
        env = {
            "GASGUARD_MAX_WORKERS": "8",
            "GASGUARD_MAX_FINDINGS": "25",
            "GASGUARD_VERBOSE": "yes",
        }
        with tempfile.TemporaryDirectory() as tmpdir:
            missing_dotenv = str(Path(tmpdir) / ".env")
            with mock.patch.dict(os.environ, env):
                config = Config.load_from_env(missing_dotenv)

        self.assertEqual(config.registry.max_workers, 8)
        self.assertEqual(config.max_findings, 25)
        self.assertTrue(config.verbose)

    def test_load_from_dotenv(self):
        """Test reading overrides from a .env file."""
        with tempfile.TemporaryDirectory() as tmpdir:
            dotenv_path = Path(tmpdir) / ".env"
            dotenv_path.write_text("GASGUARD_MAX_FILE_SIZE=2048\n")

            with mock.patch.dict(os.environ, {}):
                os.environ.pop("GASGUARD_MAX_FILE_SIZE", None)
                config = Config.load_from_env(str(dotenv_path))

        self.assertEqual(config.scan.max_file_size, 2048)


class TestExceptions(unittest.TestCase):
    """Tests for custom exceptions."""

    def test_base_error(self):
        """Test base engine error."""
        error = GasGuardError("Test error", stage="test", details={"key": "value"})

        self.assertEqual(str(error), "[test] Test error")
        self.assertEqual(error.stage, "test")
        self.assertEqual(error.details, {"key": "value"})

    def test_base_error_without_stage(self):
        self.assertEqual(str(GasGuardError("plain")), "plain")

    def test_configuration_error(self):
        error = ConfigurationError(["Unknown rule: x", "Unknown rule: y"], analyzer="SolidityAnalyzer")

        self.assertEqual(error.stage, "Configuration")
        self.assertEqual(error.errors, ["Unknown rule: x", "Unknown rule: y"])
        self.assertIn("SolidityAnalyzer", str(error))
        self.assertIn("Unknown rule: y", str(error))

    def test_detection_error(self):
        error = DetectionError("a.sol", "regex failed", rule_id="sol-001")

        self.assertEqual(error.stage, "Detection")
        self.assertEqual(error.details["file"], "a.sol")
        self.assertEqual(error.rule_id, "sol-001")

    def test_unknown_language_error(self):
        error = UnknownLanguageError("brainfuck")

        self.assertIsInstance(error, DispatchError)
        self.assertIn("brainfuck", str(error))
        self.assertEqual(error.details["language"], "brainfuck")

    def test_collision_error(self):
        error = AnalyzerCollisionError("RustAnalyzer")

        self.assertIsInstance(error, DispatchError)
        self.assertEqual(
            str(error),
            '[Dispatch] Analyzer with name "RustAnalyzer" is already registered',
        )


if __name__ == "__main__":
    unittest.main()
