"""
Language-neutral analysis result definitions.

Defines the shared vocabulary exchanged between analyzers, the registry
and downstream tooling: rules, findings, per-request configuration and
aggregate results. Field names produced by ``to_dict`` and the severity
string values form the serialized contract consumed by CI artifacts.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from gasguard.core.exceptions import ConfigurationError, UnknownLanguageError


class Severity(Enum):
    """Severity levels for findings, in decreasing urgency."""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"

    @classmethod
    def from_value(cls, value: Union["Severity", str]) -> "Severity":
        """Coerce a severity member or its string value."""
        if isinstance(value, Severity):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"Unknown severity: {value}") from None

    @property
    def rank(self) -> int:
        """Position in urgency order, 0 being the most urgent."""
        return SEVERITY_ORDER.index(self)


SEVERITY_ORDER: List[Severity] = [
    Severity.CRITICAL,
    Severity.HIGH,
    Severity.MEDIUM,
    Severity.LOW,
    Severity.INFO,
]


class Language(Enum):
    """Closed set of source dialects the engine can dispatch on."""
    SOLIDITY = "solidity"
    VYPER = "vyper"
    RUST = "rust"
    CAIRO = "cairo"
    MOVE = "move"
    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"

    @classmethod
    def from_tag(cls, tag: Union["Language", str]) -> "Language":
        """
        Resolve a language tag to a Language member.

        Accepts a member, its value, or a known alias, case-insensitively.

        Raises:
            UnknownLanguageError: If the tag names no supported dialect.
        """
        if isinstance(tag, Language):
            return tag
        normalized = str(tag).strip().lower()
        normalized = LANGUAGE_ALIASES.get(normalized, normalized)
        try:
            return cls(normalized)
        except ValueError:
            raise UnknownLanguageError(str(tag)) from None


LANGUAGE_ALIASES: Dict[str, str] = {
    "sol": "solidity",
    "vy": "vyper",
    "rs": "rust",
    "soroban": "rust",
    "js": "javascript",
    "ts": "typescript",
}


@dataclass(frozen=True)
class GasImpact:
    """Estimated gas impact range of a rule."""
    min: int
    max: int
    typical: int

    def to_dict(self) -> Dict[str, int]:
        return {"min": self.min, "max": self.max, "typical": self.typical}


@dataclass(frozen=True)
class Rule:
    """
    Immutable detection rule definition.

    An analyzer's catalog of rules is fixed when the analyzer is built.
    Configuration may disable a rule or override its severity per call,
    but never mutates the definition itself.
    """

    id: str
    name: str
    description: str
    severity: Severity
    category: str
    enabled: bool = True
    tags: Tuple[str, ...] = ()
    documentation_url: Optional[str] = None
    estimated_gas_impact: Optional[GasImpact] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "severity": self.severity.value,
            "category": self.category,
            "enabled": self.enabled,
            "tags": list(self.tags),
        }
        if self.documentation_url:
            data["documentationUrl"] = self.documentation_url
        if self.estimated_gas_impact:
            data["estimatedGasImpact"] = self.estimated_gas_impact.to_dict()
        return data


@dataclass(frozen=True)
class Location:
    """Source code location of a finding."""
    file: str
    start_line: int
    end_line: int
    start_column: Optional[int] = None
    end_column: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "file": self.file,
            "startLine": self.start_line,
            "endLine": self.end_line,
        }
        if self.start_column is not None:
            data["startColumn"] = self.start_column
        if self.end_column is not None:
            data["endColumn"] = self.end_column
        return data


@dataclass(frozen=True)
class SuggestedFix:
    """Remediation hint attached to a finding."""
    description: str
    code_snippet: Optional[str] = None
    documentation_url: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"description": self.description}
        if self.code_snippet:
            data["codeSnippet"] = self.code_snippet
        if self.documentation_url:
            data["documentationUrl"] = self.documentation_url
        return data


@dataclass(frozen=True)
class Finding:
    """A single reported rule violation at a specific location."""

    rule_id: str
    message: str
    severity: Severity
    location: Location
    estimated_gas_savings: Optional[int] = None
    suggested_fix: Optional[SuggestedFix] = None
    metadata: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        data = {
            "ruleId": self.rule_id,
            "message": self.message,
            "severity": self.severity.value,
            "location": self.location.to_dict(),
        }
        if self.estimated_gas_savings is not None:
            data["estimatedGasSavings"] = self.estimated_gas_savings
        if self.suggested_fix is not None:
            data["suggestedFix"] = self.suggested_fix.to_dict()
        if self.metadata:
            data["metadata"] = dict(self.metadata)
        return data


@dataclass(frozen=True)
class RuleOverride:
    """
    Per-request override of a single rule.

    Replaces the wire format's "boolean or object" value: ``False`` maps to
    a disabled override, ``True`` to an enabled one without a severity
    change, and an object to an enabled flag plus optional severity.
    """

    enabled: bool = True
    severity: Optional[Severity] = None
    options: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def disabled(cls) -> "RuleOverride":
        return cls(enabled=False)

    @classmethod
    def enable(cls, severity: Optional[Union[Severity, str]] = None) -> "RuleOverride":
        return cls(
            enabled=True,
            severity=Severity.from_value(severity) if severity else None,
        )

    @classmethod
    def from_value(cls, value: Any) -> "RuleOverride":
        """Build an override from a bool, a mapping or an existing override."""
        if isinstance(value, RuleOverride):
            return value
        if isinstance(value, bool):
            return cls(enabled=value)
        if isinstance(value, Mapping):
            severity = value.get("severity")
            enabled = value.get("enabled")
            return cls(
                enabled=True if enabled is None else bool(enabled),
                severity=Severity.from_value(severity) if severity else None,
                options=dict(value.get("options") or {}),
            )
        raise TypeError(
            f"Rule override must be a bool or a mapping, got {type(value).__name__}"
        )

    def to_dict(self) -> Union[bool, Dict[str, Any]]:
        if self.severity is None and not self.options:
            return self.enabled
        data: Dict[str, Any] = {"enabled": self.enabled}
        if self.severity is not None:
            data["severity"] = self.severity.value
        if self.options:
            data["options"] = dict(self.options)
        return data


@dataclass
class AnalyzerConfig:
    """
    Per-request analyzer configuration.

    Supplied fresh with each call and treated as read-only for the
    duration of a scan. Rule values may be given as booleans or mappings;
    they are normalized to RuleOverride instances.

    Raises:
        ConfigurationError: If an override or the findings cap is malformed.
    """

    rules: Dict[str, RuleOverride] = field(default_factory=dict)
    exclude_paths: List[str] = field(default_factory=list)
    include_paths: List[str] = field(default_factory=list)
    max_findings: Optional[int] = None
    options: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        errors = []
        rules = {}
        for rule_id, value in (self.rules or {}).items():
            try:
                rules[rule_id] = RuleOverride.from_value(value)
            except (ValueError, TypeError) as e:
                errors.append(f"Invalid override for {rule_id}: {e}")

        if self.max_findings is not None and (
            isinstance(self.max_findings, bool)
            or not isinstance(self.max_findings, int)
            or self.max_findings < 0
        ):
            errors.append(f"Invalid maxFindings: {self.max_findings}")

        if errors:
            raise ConfigurationError(errors)

        self.rules = rules
        self.exclude_paths = list(self.exclude_paths or [])
        self.include_paths = list(self.include_paths or [])

    def get_override(self, rule_id: str) -> Optional[RuleOverride]:
        """Return the explicit override for a rule, if any."""
        return self.rules.get(rule_id)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "AnalyzerConfig":
        """Build a config from its camelCase wire form or snake_case keys."""
        data = data or {}
        return cls(
            rules=dict(data.get("rules") or {}),
            exclude_paths=data.get("excludePaths", data.get("exclude_paths")) or [],
            include_paths=data.get("includePaths", data.get("include_paths")) or [],
            max_findings=data.get("maxFindings", data.get("max_findings")),
            options=dict(data.get("options") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "rules": {rule_id: o.to_dict() for rule_id, o in self.rules.items()},
            "excludePaths": list(self.exclude_paths),
            "includePaths": list(self.include_paths),
            "options": dict(self.options),
        }
        if self.max_findings is not None:
            data["maxFindings"] = self.max_findings
        return data


@dataclass(frozen=True)
class ScanError:
    """A contained failure of one analyzer on one file."""
    file: str
    message: str
    error_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {"file": self.file, "message": self.message}
        if self.error_type:
            data["errorType"] = self.error_type
        return data


def empty_summary() -> Dict[str, int]:
    """Summary with a zero count for every severity."""
    return {severity.value: 0 for severity in SEVERITY_ORDER}


@dataclass
class AnalysisResult:
    """Result of analyzing one file, a batch of files, or a merge of both."""

    findings: List[Finding] = field(default_factory=list)
    files_analyzed: int = 0
    analysis_time: float = 0.0
    analyzer_version: str = ""
    summary: Dict[str, int] = field(default_factory=empty_summary)
    total_estimated_gas_savings: Optional[int] = None
    errors: List[ScanError] = field(default_factory=list)

    @classmethod
    def empty(cls, analyzer_version: str, analysis_time: float = 0.0) -> "AnalysisResult":
        """All-zero result carrying only a version label."""
        return cls(analyzer_version=analyzer_version, analysis_time=analysis_time)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the serialized wire form."""
        data = {
            "findings": [f.to_dict() for f in self.findings],
            "filesAnalyzed": self.files_analyzed,
            "analysisTime": self.analysis_time,
            "analyzerVersion": self.analyzer_version,
            "summary": dict(self.summary),
        }
        if self.total_estimated_gas_savings is not None:
            data["totalEstimatedGasSavings"] = self.total_estimated_gas_savings
        if self.errors:
            data["errors"] = [e.to_dict() for e in self.errors]
        return data
