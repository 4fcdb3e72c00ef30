"""
Tests for report formatting.
"""

import json

import pytest

from gasguard.analysis.models import (
    AnalysisResult,
    Finding,
    Location,
    ScanError,
    Severity,
    SuggestedFix,
)
from gasguard.reporting.formatter import JSONFormatter, TextFormatter, format_result


@pytest.fixture
def result():
    findings = [
        Finding(
            rule_id="sol-004",
            message="Use ++i instead of i++ to save gas",
            severity=Severity.LOW,
            location=Location(file="contracts/Token.sol", start_line=12, end_line=12),
            estimated_gas_savings=10,
        ),
        Finding(
            rule_id="sol-001",
            message="Loop condition has no literal bound",
            severity=Severity.HIGH,
            location=Location(file="contracts/Token.sol", start_line=3, end_line=3),
            estimated_gas_savings=1000,
            suggested_fix=SuggestedFix(description="Bound the loop"),
        ),
        Finding(
            rule_id="soroban-001",
            message="Storage key 'COUNTER' is read 2 times. Cache the value",
            severity=Severity.HIGH,
            location=Location(file="src/lib.rs", start_line=5, end_line=12),
            estimated_gas_savings=2000,
        ),
    ]
    return AnalysisResult(
        findings=findings,
        files_analyzed=3,
        analysis_time=4.2,
        analyzer_version="registry-1.0.0",
        summary={"critical": 0, "high": 2, "medium": 0, "low": 1, "info": 0},
        total_estimated_gas_savings=3010,
        errors=[ScanError(file="contracts/Broken.sol", message="sol-002: bad input")],
    )


class TestJSONFormatter:
    """Test the serialized report."""

    def test_wire_form(self, result):
        data = json.loads(JSONFormatter().format(result))

        assert data["filesAnalyzed"] == 3
        assert data["analyzerVersion"] == "registry-1.0.0"
        assert data["totalEstimatedGasSavings"] == 3010
        assert data["findings"][0]["ruleId"] == "sol-004"
        assert data["errors"][0]["file"] == "contracts/Broken.sol"

    def test_compact(self, result):
        assert "\n" not in JSONFormatter(indent=None).format(result)


class TestTextFormatter:
    """Test the human-readable report."""

    def test_sections(self, result):
        report = TextFormatter().format(result)

        assert "GASGUARD ANALYSIS REPORT" in report
        assert "Files analyzed: 3" in report
        assert "Estimated gas savings: 3010" in report
        assert "Errors:" in report
        assert "contracts/Broken.sol: sol-002: bad input" in report

    def test_findings_ordered_by_line(self, result):
        report = TextFormatter().format(result)

        assert report.index("[sol-001]") < report.index("[sol-004]")
        assert report.index("contracts/Token.sol") < report.index("src/lib.rs")
        assert "5-12" in report
        assert "fix: Bound the loop" in report

    def test_summary_counts(self, result):
        report = TextFormatter().format(result)
        summary = report[report.index("SUMMARY"):]

        assert "high       2" in summary
        assert "total      3" in summary

    def test_empty_result(self):
        report = TextFormatter().format(AnalysisResult.empty("1.0.0"))

        assert "No findings." in report
        assert "Estimated gas savings" not in report
        assert "Errors:" not in report


class TestFormatResult:
    """Test format selection and saving."""

    def test_save(self, result, tmp_path):
        output = tmp_path / "reports" / "report.json"
        formatted = format_result(result, "json", output)

        assert output.exists()
        assert json.loads(output.read_text()) == json.loads(formatted)

    def test_default_is_text(self, result):
        assert format_result(result).startswith("=")
