"""
Tests for source collection, language detection and input validation.
"""

import pytest

from gasguard.analysis.detector import LanguageDetector
from gasguard.analysis.models import Language
from gasguard.core.config import ScanConfig
from gasguard.ingestion.collector import SourceCollector
from gasguard.utils.validation import validate_language, validate_path


@pytest.fixture
def project(tmp_path):
    """Small contract tree with files that should and should not be scanned."""
    (tmp_path / "contracts").mkdir()
    (tmp_path / "contracts" / "Token.sol").write_text("contract Token {}\n")
    (tmp_path / "contracts" / "Vault.vy").write_text("@external\ndef f():\n    pass\n")
    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "Dep.sol").write_text("contract Dep {}\n")
    (tmp_path / "test").mkdir()
    (tmp_path / "test" / "Token.t.sol").write_text("contract TokenTest {}\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "lib.rs").write_text("fn main() {}\n")
    (tmp_path / "README.md").write_text("# readme\n")
    return tmp_path


class TestLanguageDetector:
    """Test extension-based language detection."""

    def test_known_extensions(self):
        detector = LanguageDetector()

        assert detector.detect_file_language("a/Token.sol").language == Language.SOLIDITY
        assert detector.detect_file_language("Vault.VY").language == Language.VYPER
        assert detector.detect_file_language("lib.rs").method == "extension"

    def test_unknown_extension(self):
        result = LanguageDetector().detect_file_language("notes.txt")

        assert result.language is None
        assert result.method == "none"

    def test_custom_extensions(self):
        detector = LanguageDetector({".soroban": "soroban"})
        assert detector.detect_file_language("x.soroban").language == Language.RUST

    def test_build_language_map(self):
        mapping = LanguageDetector().build_language_map(["a.sol", "b.vy", "c.txt"])
        assert mapping == {"a.sol": Language.SOLIDITY, "b.vy": Language.VYPER}

    def test_extensions_for_language(self):
        assert LanguageDetector().get_extensions_for_language(Language.VYPER) == [".vy", ".vyi"]


class TestSourceCollector:
    """Test reading sources from disk."""

    def test_collect_directory(self, project):
        files = SourceCollector().collect([str(project)])
        names = sorted(path.rsplit("/", 1)[-1] for path in files)

        assert names == ["Token.sol", "Vault.vy", "lib.rs"]
        token = next(path for path in files if path.endswith("Token.sol"))
        assert files[token] == "contract Token {}\n"

    def test_explicit_file_ignores_patterns(self, project):
        target = project / "test" / "Token.t.sol"
        files = SourceCollector().collect([str(target)])

        assert list(files) == [target.as_posix()]

    def test_explicit_unknown_extension(self, project):
        assert SourceCollector().collect([str(project / "README.md")]) == {}

    def test_extra_ignore_patterns(self, project):
        collector = SourceCollector(ignore_patterns=["contracts"])
        files = collector.collect([str(project)])
        names = sorted(path.rsplit("/", 1)[-1] for path in files)

        assert "Token.sol" not in names
        assert "Dep.sol" in names

    def test_size_limit(self, project):
        collector = SourceCollector(ScanConfig(max_file_size=20))
        files = collector.collect([str(project / "contracts")])

        assert list(files) == [(project / "contracts" / "Token.sol").as_posix()]

    def test_line_limit(self, tmp_path):
        source = tmp_path / "Long.sol"
        source.write_text("\n".join(f"// line {i}" for i in range(20)))

        files = SourceCollector(ScanConfig(max_lines_per_file=5)).collect([str(source)])

        assert files[source.as_posix()].count("\n") == 4


class TestValidation:
    """Test input validation helpers."""

    def test_validate_existing_path(self, project):
        assert validate_path(str(project)) == (True, None)
        assert validate_path(str(project / "src" / "lib.rs")) == (True, None)

    def test_validate_missing_path(self, tmp_path):
        is_valid, error = validate_path(str(tmp_path / "missing"))

        assert not is_valid
        assert "does not exist" in error

    def test_validate_empty_path(self):
        assert validate_path("") == (False, "Path cannot be empty")

    def test_validate_language(self):
        assert validate_language("soroban") == (True, None)

        is_valid, error = validate_language("cobol")
        assert not is_valid
        assert "Unknown language: cobol" in error
