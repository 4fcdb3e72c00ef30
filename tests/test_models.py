"""
Unit tests for the shared analysis data model.
"""

import unittest

from gasguard.analysis.models import (
    AnalysisResult,
    AnalyzerConfig,
    Finding,
    Language,
    Location,
    Rule,
    RuleOverride,
    ScanError,
    Severity,
    SuggestedFix,
    GasImpact,
)
from gasguard.core.exceptions import (
    ConfigurationError,
    DispatchError,
    UnknownLanguageError,
)


class TestSeverity(unittest.TestCase):
    """Tests for severity coercion and ordering."""

    def test_from_value(self):
        self.assertEqual(Severity.from_value("HIGH"), Severity.HIGH)
        self.assertEqual(Severity.from_value(Severity.LOW), Severity.LOW)

    def test_unknown_severity(self):
        with self.assertRaises(ValueError):
            Severity.from_value("urgent")

    def test_rank_order(self):
        self.assertEqual(Severity.CRITICAL.rank, 0)
        self.assertLess(Severity.HIGH.rank, Severity.MEDIUM.rank)
        self.assertEqual(Severity.INFO.rank, 4)


class TestLanguage(unittest.TestCase):
    """Tests for language tag resolution."""

    def test_canonical_tags(self):
        self.assertEqual(Language.from_tag("solidity"), Language.SOLIDITY)
        self.assertEqual(Language.from_tag("Vyper"), Language.VYPER)

    def test_aliases(self):
        self.assertEqual(Language.from_tag("sol"), Language.SOLIDITY)
        self.assertEqual(Language.from_tag("soroban"), Language.RUST)
        self.assertEqual(Language.from_tag("ts"), Language.TYPESCRIPT)

    def test_unknown_tag(self):
        with self.assertRaises(UnknownLanguageError) as ctx:
            Language.from_tag("cobol")

        self.assertIsInstance(ctx.exception, DispatchError)
        self.assertEqual(ctx.exception.details["language"], "cobol")


class TestRuleOverride(unittest.TestCase):
    """Tests for the boolean-or-object rule override."""

    def test_from_bool(self):
        self.assertFalse(RuleOverride.from_value(False).enabled)
        self.assertTrue(RuleOverride.from_value(True).enabled)
        self.assertIsNone(RuleOverride.from_value(True).severity)

    def test_from_mapping(self):
        override = RuleOverride.from_value({"severity": "critical"})

        self.assertTrue(override.enabled)
        self.assertEqual(override.severity, Severity.CRITICAL)

    def test_mapping_can_disable(self):
        override = RuleOverride.from_value({"enabled": False, "severity": "low"})

        self.assertFalse(override.enabled)
        self.assertEqual(override.severity, Severity.LOW)

    def test_invalid_value(self):
        with self.assertRaises(TypeError):
            RuleOverride.from_value(3)

    def test_to_dict(self):
        self.assertIs(RuleOverride.disabled().to_dict(), False)
        self.assertEqual(
            RuleOverride.enable("high").to_dict(),
            {"enabled": True, "severity": "high"},
        )


class TestAnalyzerConfig(unittest.TestCase):
    """Tests for per-request configuration."""

    def test_rules_are_normalized(self):
        config = AnalyzerConfig(rules={"sol-001": False, "sol-002": {"severity": "low"}})

        self.assertIsInstance(config.get_override("sol-001"), RuleOverride)
        self.assertFalse(config.get_override("sol-001").enabled)
        self.assertEqual(config.get_override("sol-002").severity, Severity.LOW)
        self.assertIsNone(config.get_override("sol-003"))

    def test_from_wire_form(self):
        config = AnalyzerConfig.from_dict({
            "rules": {"sol-004": False},
            "excludePaths": ["test/"],
            "includePaths": ["contracts/"],
            "maxFindings": 5,
        })

        self.assertEqual(config.exclude_paths, ["test/"])
        self.assertEqual(config.include_paths, ["contracts/"])
        self.assertEqual(config.max_findings, 5)
        self.assertFalse(config.rules["sol-004"].enabled)

    def test_from_snake_case(self):
        config = AnalyzerConfig.from_dict({"exclude_paths": ["mocks/"], "max_findings": 2})

        self.assertEqual(config.exclude_paths, ["mocks/"])
        self.assertEqual(config.max_findings, 2)

    def test_from_none(self):
        config = AnalyzerConfig.from_dict(None)

        self.assertEqual(config.rules, {})
        self.assertIsNone(config.max_findings)

    def test_to_dict(self):
        config = AnalyzerConfig(
            rules={"sol-001": False, "sol-002": {"severity": "low"}},
            max_findings=3,
        )
        data = config.to_dict()

        self.assertEqual(data["rules"]["sol-001"], False)
        self.assertEqual(data["rules"]["sol-002"], {"enabled": True, "severity": "low"})
        self.assertEqual(data["maxFindings"], 3)

    def test_invalid_overrides_are_configuration_errors(self):
        with self.assertRaises(ConfigurationError) as ctx:
            AnalyzerConfig.from_dict({
                "rules": {"sol-001": {"severity": "urgent"}, "sol-002": 3},
            })

        self.assertEqual(len(ctx.exception.errors), 2)
        self.assertIn("sol-001", ctx.exception.errors[0])
        self.assertIn("Unknown severity: urgent", ctx.exception.errors[0])
        self.assertIn("sol-002", ctx.exception.errors[1])

    def test_invalid_max_findings(self):
        for value in (-1, "5", True):
            with self.assertRaises(ConfigurationError):
                AnalyzerConfig(max_findings=value)

        self.assertEqual(AnalyzerConfig(max_findings=0).max_findings, 0)


class TestSerialization(unittest.TestCase):
    """Tests for the camelCase wire form."""

    def _finding(self, **kwargs):
        defaults = dict(
            rule_id="sol-003",
            message="Array length is not cached in loop.",
            severity=Severity.MEDIUM,
            location=Location(file="contracts/Token.sol", start_line=8, end_line=8),
        )
        defaults.update(kwargs)
        return Finding(**defaults)

    def test_finding_to_dict(self):
        finding = self._finding(
            estimated_gas_savings=200,
            suggested_fix=SuggestedFix(description="Cache the length", code_snippet="uint256 n = a.length;"),
        )
        data = finding.to_dict()

        self.assertEqual(data["ruleId"], "sol-003")
        self.assertEqual(data["severity"], "medium")
        self.assertEqual(data["location"], {"file": "contracts/Token.sol", "startLine": 8, "endLine": 8})
        self.assertEqual(data["estimatedGasSavings"], 200)
        self.assertEqual(data["suggestedFix"]["codeSnippet"], "uint256 n = a.length;")
        self.assertNotIn("metadata", data)

    def test_location_columns_are_optional(self):
        location = Location(file="a.sol", start_line=1, end_line=2, start_column=4)
        data = location.to_dict()

        self.assertEqual(data["startColumn"], 4)
        self.assertNotIn("endColumn", data)

    def test_rule_to_dict(self):
        rule = Rule(
            id="sol-001",
            name="Unbounded Loop",
            description="Loops without bounds",
            severity=Severity.HIGH,
            category="gas-optimization",
            tags=("loops",),
            estimated_gas_impact=GasImpact(min=100, max=5000, typical=1000),
        )
        data = rule.to_dict()

        self.assertEqual(data["severity"], "high")
        self.assertEqual(data["tags"], ["loops"])
        self.assertEqual(data["estimatedGasImpact"]["typical"], 1000)
        self.assertNotIn("documentationUrl", data)

    def test_empty_result(self):
        data = AnalysisResult.empty("1.0.0").to_dict()

        self.assertEqual(data["findings"], [])
        self.assertEqual(data["filesAnalyzed"], 0)
        self.assertEqual(data["analyzerVersion"], "1.0.0")
        self.assertEqual(
            data["summary"],
            {"critical": 0, "high": 0, "medium": 0, "low": 0, "info": 0},
        )
        self.assertNotIn("totalEstimatedGasSavings", data)
        self.assertNotIn("errors", data)

    def test_result_with_errors(self):
        result = AnalysisResult(
            findings=[self._finding()],
            files_analyzed=2,
            analyzer_version="1.0.0",
            summary={"critical": 0, "high": 0, "medium": 1, "low": 0, "info": 0},
            total_estimated_gas_savings=200,
            errors=[ScanError(file="b.sol", message="boom", error_type="RuntimeError")],
        )
        data = result.to_dict()

        self.assertTrue(result.has_errors)
        self.assertEqual(data["totalEstimatedGasSavings"], 200)
        self.assertEqual(
            data["errors"],
            [{"file": "b.sol", "message": "boom", "errorType": "RuntimeError"}],
        )


if __name__ == "__main__":
    unittest.main()
