"""
Static analysis module with pluggable per-language analyzers.

Provides the analyzer capability, the built-in heuristic analyzers and
the registry that dispatches source text to them and merges results.
"""

from gasguard.analysis.analyzer import (
    BaseAnalyzer,
    Check,
    LineSpan,
    calculate_summary,
    calculate_total_gas_savings,
    is_rule_enabled,
    matches_pattern,
    resolve_severity,
    should_analyze_file,
)
from gasguard.analysis.detector import LanguageDetector
from gasguard.analysis.models import (
    AnalysisResult,
    AnalyzerConfig,
    Finding,
    GasImpact,
    Language,
    Location,
    Rule,
    RuleOverride,
    ScanError,
    Severity,
    SuggestedFix,
)
from gasguard.analysis.registry import (
    REGISTRY_VERSION,
    AnalyzerRegistry,
    create_default_registry,
    merge_results,
)

__all__ = [
    "BaseAnalyzer",
    "Check",
    "LineSpan",
    "calculate_summary",
    "calculate_total_gas_savings",
    "is_rule_enabled",
    "matches_pattern",
    "resolve_severity",
    "should_analyze_file",
    "LanguageDetector",
    "AnalysisResult",
    "AnalyzerConfig",
    "Finding",
    "GasImpact",
    "Language",
    "Location",
    "Rule",
    "RuleOverride",
    "ScanError",
    "Severity",
    "SuggestedFix",
    "REGISTRY_VERSION",
    "AnalyzerRegistry",
    "create_default_registry",
    "merge_results",
]
