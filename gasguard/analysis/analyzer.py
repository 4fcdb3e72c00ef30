"""
Analyzer capability and shared analyzer behaviors.

Defines the interface every language analyzer implements and the helper
logic common to all of them: path filtering, rule enablement and severity
resolution, and summary/savings computation. The helpers are plain
functions so the registry can reuse them when merging results.
"""

import fnmatch
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Mapping,
    NamedTuple,
    Optional,
    Tuple,
    Union,
)

from gasguard.core.exceptions import (
    ConfigurationError,
    DetectionError,
    UnknownLanguageError,
)
from gasguard.analysis.models import (
    AnalysisResult,
    AnalyzerConfig,
    Finding,
    Language,
    Location,
    Rule,
    ScanError,
    Severity,
    SuggestedFix,
    empty_summary,
)

logger = logging.getLogger(__name__)

GLOB_CHARACTERS = ("*", "?", "[")
RULE_DOCS_URL = "https://docs.gasguard.dev/rules/{rule_id}"


def docs_url(rule_id: str) -> str:
    """Documentation link for a rule."""
    return RULE_DOCS_URL.format(rule_id=rule_id)


class LineSpan(NamedTuple):
    """1-based inclusive line range reported by a detector."""
    start_line: int
    end_line: int
    metadata: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class Check:
    """
    Binding between a rule and the detector that reports it.

    ``detector`` names a method of the analyzer taking the source text and
    returning a list of LineSpan. ``message`` may reference span metadata
    keys with ``str.format`` placeholders.
    """

    rule_id: str
    detector: str
    message: str
    estimated_gas_savings: Optional[int]
    suggested_fix: Optional[SuggestedFix] = None
    dialect_only: bool = False


def matches_pattern(file_path: str, pattern: str) -> bool:
    """
    Check whether a path matches an include/exclude pattern.

    Patterns without glob characters match as substrings. Glob patterns
    are matched against the whole path and against every trailing run
    of path components, so ``"*.t.sol"`` matches ``"test/Foo.t.sol"``.
    """
    normalized = file_path.replace("\\", "/")
    if not any(char in pattern for char in GLOB_CHARACTERS):
        return pattern in normalized

    if fnmatch.fnmatch(normalized, pattern):
        return True

    parts = [part for part in normalized.split("/") if part]
    for index in range(len(parts)):
        if fnmatch.fnmatch("/".join(parts[index:]), pattern):
            return True
    return False


def should_analyze_file(file_path: str, config: Optional[AnalyzerConfig]) -> bool:
    """Apply exclude patterns first, then include patterns."""
    if config is None:
        return True

    for pattern in config.exclude_paths:
        if matches_pattern(file_path, pattern):
            return False

    if config.include_paths:
        return any(
            matches_pattern(file_path, pattern) for pattern in config.include_paths
        )

    return True


def is_rule_enabled(rule: Rule, config: Optional[AnalyzerConfig]) -> bool:
    """An explicit override wins over the rule's default-enabled flag."""
    override = config.get_override(rule.id) if config else None
    if override is None:
        return rule.enabled
    return override.enabled


def resolve_severity(rule: Rule, config: Optional[AnalyzerConfig]) -> Severity:
    """A configured severity override wins over the rule default."""
    override = config.get_override(rule.id) if config else None
    if override is not None and override.severity is not None:
        return override.severity
    return rule.severity


def calculate_summary(findings: Iterable[Finding]) -> Dict[str, int]:
    """Count findings per severity."""
    summary = empty_summary()
    for finding in findings:
        summary[finding.severity.value] += 1
    return summary


def calculate_total_gas_savings(findings: Iterable[Finding]) -> Optional[int]:
    """Sum estimated savings; None rather than 0 when nothing is saved."""
    total = sum(f.estimated_gas_savings or 0 for f in findings)
    return total if total > 0 else None


def cap_findings(findings: List[Finding], max_findings: Optional[int]) -> List[Finding]:
    """Keep at most ``max_findings`` findings, in detection order."""
    if max_findings is None or len(findings) <= max_findings:
        return findings
    return findings[:max_findings]


def elapsed_ms(start: float) -> float:
    """Milliseconds elapsed since a ``time.perf_counter()`` reading."""
    return (time.perf_counter() - start) * 1000.0


class BaseAnalyzer(ABC):
    """
    Abstract base class for language analyzers.

    Each analyzer owns a fixed rule catalog and one detector per rule.
    Subclasses declare their identity and catalog through class attributes:

        NAME: Globally unique analyzer name.
        VERSION: Analyzer version label.
        LANGUAGES: Languages the analyzer serves.
        RULES: Immutable rule catalog.
        CHECKS: Detector bindings, run in declaration order.

    and implement ``detect_dialect`` when some rules only apply to a
    specialized runtime.
    """

    NAME: str = "unknown"
    VERSION: str = "0.0.0"
    LANGUAGES: Tuple[Language, ...] = ()
    RULES: Tuple[Rule, ...] = ()
    CHECKS: Tuple[Check, ...] = ()

    def __init__(self):
        self._config = AnalyzerConfig()
        self._initialized = False
        self._rules_by_id: Dict[str, Rule] = {rule.id: rule for rule in self.RULES}

    def get_name(self) -> str:
        return self.NAME

    def get_version(self) -> str:
        return self.VERSION

    def get_supported_languages(self) -> List[Language]:
        return list(self.LANGUAGES)

    def supports_language(self, language: Union[Language, str]) -> bool:
        """Check whether this analyzer serves a language tag or member."""
        try:
            resolved = Language.from_tag(language)
        except UnknownLanguageError:
            return False
        return resolved in self.LANGUAGES

    def get_rules(self) -> List[Rule]:
        return list(self.RULES)

    def get_rule(self, rule_id: str) -> Optional[Rule]:
        return self._rules_by_id.get(rule_id)

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    def validate_config(self, config: AnalyzerConfig) -> List[str]:
        """
        Validate a configuration against this analyzer's catalog.

        Returns:
            List of human-readable problems, empty when the config is valid.
        """
        errors = []
        for rule_id in config.rules:
            if rule_id not in self._rules_by_id:
                errors.append(f"Unknown rule: {rule_id}")

        if config.max_findings is not None and config.max_findings < 0:
            errors.append(f"Invalid maxFindings: {config.max_findings}")

        return errors

    def initialize(self, config: Optional[AnalyzerConfig] = None) -> None:
        """
        Prepare the analyzer, optionally with a default configuration.

        Idempotent once initialized. An invalid config raises before any
        state changes, leaving the analyzer uninitialized.

        Raises:
            ConfigurationError: If the config references unknown rules.
        """
        if self._initialized:
            return

        if config is not None:
            errors = self.validate_config(config)
            if errors:
                raise ConfigurationError(errors, analyzer=self.get_name())
            self._config = config

        self._initialized = True
        logger.debug(f"Initialized analyzer {self.get_name()} v{self.get_version()}")

    def dispose(self) -> None:
        """Release analyzer state; a later call re-initializes lazily."""
        self._initialized = False
        self._config = AnalyzerConfig()

    def detect_dialect(self, code: str) -> bool:
        """Whether the source carries this analyzer's dialect marker."""
        return False

    def analyze(
        self,
        code: str,
        file_path: str,
        config: Optional[AnalyzerConfig] = None,
    ) -> AnalysisResult:
        """
        Analyze a single source file.

        Args:
            code: Source text.
            file_path: Path reported in findings; never read from disk.
            config: Per-call configuration, defaults to the one given
                to ``initialize``.

        Returns:
            AnalysisResult for the file. Detector failures are reported
            in ``errors`` instead of being raised.
        """
        start = time.perf_counter()
        effective = self._effective_config(config)

        if not should_analyze_file(file_path, effective):
            logger.debug(f"{self.get_name()}: skipping filtered file {file_path}")
            return AnalysisResult.empty(self.get_version(), elapsed_ms(start))

        findings, errors = self.run_checks(code, file_path, effective)
        findings = cap_findings(findings, effective.max_findings)

        logger.debug(
            f"{self.get_name()}: {file_path} -> "
            f"{len(findings)} findings, {len(errors)} errors"
        )

        return self._build_result(findings, errors, 1, start)

    def analyze_multiple(
        self,
        files: Mapping[str, str],
        config: Optional[AnalyzerConfig] = None,
    ) -> AnalysisResult:
        """
        Analyze several files sequentially.

        A failure on one file is recorded as an error entry naming that
        file and never aborts the remaining files.
        """
        start = time.perf_counter()
        effective = self._effective_config(config)
        findings: List[Finding] = []
        errors: List[ScanError] = []
        files_analyzed = 0

        for file_path, code in files.items():
            try:
                result = self.analyze(code, file_path, config)
            except Exception as e:
                logger.warning(f"{self.get_name()}: error analyzing {file_path}: {e}")
                errors.append(ScanError(
                    file=file_path,
                    message=str(e),
                    error_type=type(e).__name__,
                ))
                continue

            findings.extend(result.findings)
            errors.extend(result.errors)
            files_analyzed += result.files_analyzed

        findings = cap_findings(findings, effective.max_findings)
        return self._build_result(findings, errors, files_analyzed, start)

    def _effective_config(self, config: Optional[AnalyzerConfig]) -> AnalyzerConfig:
        """
        Initialize lazily and pick the config governing one call.

        A per-call config is checked for limits even after initialization,
        since ``initialize`` only validates the first config it sees.
        """
        if not self._initialized:
            self.initialize(config)

        if config is None:
            return self._config

        if config.max_findings is not None and config.max_findings < 0:
            raise ConfigurationError(
                [f"Invalid maxFindings: {config.max_findings}"],
                analyzer=self.get_name(),
            )
        return config

    def run_checks(
        self,
        code: str,
        file_path: str,
        config: AnalyzerConfig,
    ) -> Tuple[List[Finding], List[ScanError]]:
        """
        Run every enabled detector over one file.

        Dialect-only checks are skipped when the source lacks the dialect
        marker. An exception from one detector is converted into a
        ScanError and the remaining detectors still run.
        """
        findings: List[Finding] = []
        errors: List[ScanError] = []
        has_dialect = self.detect_dialect(code)

        for check in self.CHECKS:
            rule = self._rules_by_id[check.rule_id]
            if not is_rule_enabled(rule, config):
                continue
            if check.dialect_only and not has_dialect:
                continue

            detector: Callable[[str], List[LineSpan]] = getattr(self, check.detector)
            severity = resolve_severity(rule, config)
            try:
                check_findings = [
                    self._make_finding(check, span, severity, file_path)
                    for span in detector(code)
                ]
            except Exception as e:
                logger.warning(
                    f"{self.get_name()}: detector for {check.rule_id} "
                    f"failed on {file_path}: {e}"
                )
                errors.append(ScanError(
                    file=file_path,
                    message=f"{check.rule_id}: {e}",
                    error_type=type(e).__name__,
                ))
                continue

            findings.extend(check_findings)

        return findings, errors

    def _make_finding(
        self,
        check: Check,
        span: LineSpan,
        severity: Severity,
        file_path: str,
    ) -> Finding:
        """Wrap a detector span into a Finding using the check's template."""
        if span.start_line < 1 or span.end_line < span.start_line:
            raise DetectionError(
                file_path,
                f"Invalid line span {span.start_line}-{span.end_line}",
                rule_id=check.rule_id,
            )

        message = check.message
        if span.metadata:
            message = message.format_map(span.metadata)

        return Finding(
            rule_id=check.rule_id,
            message=message,
            severity=severity,
            location=Location(
                file=file_path,
                start_line=span.start_line,
                end_line=span.end_line,
            ),
            estimated_gas_savings=check.estimated_gas_savings,
            suggested_fix=check.suggested_fix,
            metadata=dict(span.metadata) if span.metadata else None,
        )

    def _build_result(
        self,
        findings: List[Finding],
        errors: List[ScanError],
        files_analyzed: int,
        start: float,
    ) -> AnalysisResult:
        return AnalysisResult(
            findings=findings,
            files_analyzed=files_analyzed,
            analysis_time=elapsed_ms(start),
            analyzer_version=self.get_version(),
            summary=calculate_summary(findings),
            total_estimated_gas_savings=calculate_total_gas_savings(findings),
            errors=errors,
        )

    @abstractmethod
    def describe(self) -> str:
        """One-line human description of the analyzer."""
