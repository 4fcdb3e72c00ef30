"""
Tests for the command-line interface.
"""

import json
import logging

import pytest
from click.testing import CliRunner

from gasguard.cli import cli
from gasguard.core.config import Config


UNBOUNDED = """contract Queue {
    uint256[] items;

    function drain() external {
        while (items.length > 0) {
            items.pop();
        }
        for (uint256 i = 0; i < items.length; ++i) {
        }
    }
}
"""


@pytest.fixture(autouse=True)
def reset_config():
    Config.reset()
    yield
    Config.reset()

    package_logger = logging.getLogger("gasguard")
    for handler in list(package_logger.handlers):
        package_logger.removeHandler(handler)
        handler.close()
    package_logger.setLevel(logging.NOTSET)


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def contracts(tmp_path):
    (tmp_path / "Queue.sol").write_text(UNBOUNDED)
    (tmp_path / "Clean.vy").write_text("@internal\ndef _f():\n    pass\n")
    return tmp_path


class TestScanCommand:
    """Test the scan command."""

    def test_text_report(self, runner, contracts):
        result = runner.invoke(cli, ["scan", str(contracts)])

        assert result.exit_code == 0
        assert "GASGUARD ANALYSIS REPORT" in result.output
        assert "[sol-001]" in result.output
        assert "Files analyzed: 2" in result.output

    def test_json_report_to_file(self, runner, contracts, tmp_path):
        output = tmp_path / "out" / "report.json"
        result = runner.invoke(
            cli, ["scan", str(contracts), "--format", "json", "--output", str(output)]
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["filesAnalyzed"] == 2
        assert {f["ruleId"] for f in data["findings"]} == {"sol-001", "sol-003"}
        assert data["summary"]["high"] == 1

    def test_disable_rule(self, runner, contracts, tmp_path):
        output = tmp_path / "report.json"
        result = runner.invoke(
            cli,
            ["scan", str(contracts), "-f", "json", "-o", str(output), "--disable", "sol-003"],
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert [f["ruleId"] for f in data["findings"]] == ["sol-001"]

    def test_unknown_rule(self, runner, contracts):
        result = runner.invoke(cli, ["scan", str(contracts), "--disable", "sol-999"])

        assert result.exit_code == 2
        assert "Unknown rule: sol-999" in result.output

    def test_fail_on(self, runner, contracts):
        result = runner.invoke(cli, ["scan", str(contracts), "--fail-on", "high"])
        assert result.exit_code == 1

        result = runner.invoke(cli, ["scan", str(contracts), "--fail-on", "critical"])
        assert result.exit_code == 0

    def test_exclude(self, runner, contracts, tmp_path):
        output = tmp_path / "report.json"
        result = runner.invoke(
            cli,
            ["scan", str(contracts), "-f", "json", "-o", str(output), "--exclude", "Queue.sol"],
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["filesAnalyzed"] == 1
        assert data["findings"] == []

    def test_config_file(self, runner, contracts, tmp_path):
        config_path = tmp_path / "gasguard.json"
        config_path.write_text(json.dumps({"rules": {"sol-001": False}}))
        output = tmp_path / "report.json"

        result = runner.invoke(
            cli,
            ["scan", str(contracts), "-c", str(config_path), "-f", "json", "-o", str(output)],
        )

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert [f["ruleId"] for f in data["findings"]] == ["sol-003"]

    def test_config_file_with_invalid_severity(self, runner, contracts, tmp_path):
        config_path = tmp_path / "gasguard.json"
        config_path.write_text(json.dumps({"rules": {"sol-001": {"severity": "urgent"}}}))

        result = runner.invoke(cli, ["scan", str(contracts), "-c", str(config_path)])

        assert result.exit_code == 2
        assert "Unknown severity: urgent" in result.output

    def test_config_file_with_negative_cap(self, runner, contracts, tmp_path):
        config_path = tmp_path / "gasguard.json"
        config_path.write_text(json.dumps({"max_findings": -1}))

        result = runner.invoke(cli, ["scan", str(contracts), "-c", str(config_path)])

        assert result.exit_code == 2
        assert "Invalid maxFindings: -1" in result.output

    def test_missing_path(self, runner, tmp_path):
        result = runner.invoke(cli, ["scan", str(tmp_path / "missing")])

        assert result.exit_code == 2
        assert "does not exist" in result.output

    def test_invalid_language(self, runner, contracts):
        result = runner.invoke(cli, ["scan", str(contracts), "--language", "cobol"])

        assert result.exit_code == 2
        assert "Unknown language: cobol" in result.output

    def test_verbose_log_file(self, runner, contracts, tmp_path):
        log_file = tmp_path / "logs" / "gasguard.log"
        result = runner.invoke(
            cli, ["--verbose", "--log-file", str(log_file), "scan", str(contracts)]
        )

        assert result.exit_code == 0
        content = log_file.read_text()
        assert "Collected 2 files" in content
        assert "gasguard.analysis.registry" in content

    def test_no_sources(self, runner, tmp_path):
        (tmp_path / "notes.txt").write_text("nothing")
        result = runner.invoke(cli, ["scan", str(tmp_path)])

        assert result.exit_code == 0
        assert "No supported source files found." in result.output


class TestCatalogCommands:
    """Test the rules and languages commands."""

    def test_rules_for_language(self, runner):
        result = runner.invoke(cli, ["rules", "--language", "vyper"])

        assert result.exit_code == 0
        assert "vyper-001" in result.output
        assert "vyper-002" in result.output
        assert "sol-001" not in result.output

    def test_rules_json(self, runner):
        result = runner.invoke(cli, ["rules", "--json"])

        assert result.exit_code == 0
        ids = [rule["id"] for rule in json.loads(result.output)]
        assert len(ids) == 20
        assert "soroban-002" in ids

    def test_rules_unknown_language(self, runner):
        result = runner.invoke(cli, ["rules", "-l", "cobol"])
        assert result.exit_code == 2

    def test_languages(self, runner):
        result = runner.invoke(cli, ["languages"])

        assert result.exit_code == 0
        assert "solidity (.sol)" in result.output
        assert "RustAnalyzer v1.0.0" in result.output


class TestInitCommand:
    """Test configuration file creation."""

    def test_init(self, runner, tmp_path):
        output = tmp_path / "gasguard.json"
        result = runner.invoke(cli, ["init", "--output", str(output)])

        assert result.exit_code == 0
        data = json.loads(output.read_text())
        assert data["registry"]["max_workers"] == 4
        assert "scan" in data
