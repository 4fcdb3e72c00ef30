"""
Report formatters for different output formats.

Provides formatters rendering an AnalysisResult as machine-readable JSON
(the stable wire form) or as a human-readable text report.
"""

import json
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from pathlib import Path
from typing import Dict, List, Optional

from gasguard.analysis.models import SEVERITY_ORDER, AnalysisResult, Finding

logger = logging.getLogger(__name__)


class ReportFormatter(ABC):
    """Abstract base class for report formatters."""

    @abstractmethod
    def format(self, result: AnalysisResult) -> str:
        """Format a result to string."""
        pass

    def save(self, result: AnalysisResult, path: Path) -> None:
        """Save formatted result to file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.format(result), encoding="utf-8")
        logger.info(f"Report saved to {path}")


class JSONFormatter(ReportFormatter):
    """Formats results as the serialized AnalysisResult contract."""

    def __init__(self, indent: Optional[int] = 2):
        self.indent = indent

    def format(self, result: AnalysisResult) -> str:
        return json.dumps(result.to_dict(), indent=self.indent)


class TextFormatter(ReportFormatter):
    """
    Formats results as a human-readable text report.

    Findings are grouped by file and ordered by line, followed by the
    severity summary, estimated savings and any contained errors.
    """

    def __init__(self, width: int = 80):
        self.width = width
        self.section_char = "="
        self.subsection_char = "-"

    def format(self, result: AnalysisResult) -> str:
        lines = []
        lines.extend(self._format_header(result))
        lines.extend(self._format_findings(result.findings))
        lines.extend(self._format_summary(result))
        lines.extend(self._format_errors(result))
        return "\n".join(lines)

    def _format_header(self, result: AnalysisResult) -> List[str]:
        return [
            self.section_char * self.width,
            self._center("GASGUARD ANALYSIS REPORT"),
            self.section_char * self.width,
            f"Files analyzed: {result.files_analyzed}",
            f"Analysis time:  {result.analysis_time:.1f} ms",
            f"Analyzer:       {result.analyzer_version}",
            "",
        ]

    def _format_findings(self, findings: List[Finding]) -> List[str]:
        if not findings:
            return ["No findings.", ""]

        by_file: Dict[str, List[Finding]] = defaultdict(list)
        for finding in findings:
            by_file[finding.location.file].append(finding)

        lines = []
        for file_path in sorted(by_file):
            lines.append(file_path)
            lines.append(self.subsection_char * self.width)
            ordered = sorted(
                by_file[file_path],
                key=lambda f: (f.location.start_line, f.severity.rank),
            )
            for finding in ordered:
                lines.append(self._format_finding(finding))
                if finding.suggested_fix:
                    lines.append(f"      fix: {finding.suggested_fix.description}")
            lines.append("")
        return lines

    def _format_finding(self, finding: Finding) -> str:
        location = finding.location
        span = str(location.start_line)
        if location.end_line != location.start_line:
            span = f"{location.start_line}-{location.end_line}"

        line = (
            f"  {span:>7}  {finding.severity.value.upper():8} "
            f"[{finding.rule_id}] {finding.message}"
        )
        if finding.estimated_gas_savings:
            line += f" (~{finding.estimated_gas_savings} gas)"
        return line

    def _format_summary(self, result: AnalysisResult) -> List[str]:
        lines = [
            self.section_char * self.width,
            self._center("SUMMARY"),
            self.section_char * self.width,
        ]
        for severity in SEVERITY_ORDER:
            lines.append(f"  {severity.value:10} {result.summary.get(severity.value, 0)}")
        lines.append(f"  {'total':10} {len(result.findings)}")

        if result.total_estimated_gas_savings is not None:
            lines.append("")
            lines.append(
                f"  Estimated gas savings: {result.total_estimated_gas_savings}"
            )
        lines.append("")
        return lines

    def _format_errors(self, result: AnalysisResult) -> List[str]:
        if not result.errors:
            return []
        lines = ["Errors:"]
        for error in result.errors:
            lines.append(f"  {error.file}: {error.message}")
        lines.append("")
        return lines

    def _center(self, text: str) -> str:
        return text.center(self.width)


def format_result(
    result: AnalysisResult,
    format_type: str = "text",
    output_path: Optional[Path] = None,
) -> str:
    """
    Format and optionally save an analysis result.

    Args:
        result: Result to format.
        format_type: Output format ("text", "json").
        output_path: Optional path to save the report.

    Returns:
        Formatted report string.
    """
    if format_type == "json":
        formatter = JSONFormatter()
    else:
        formatter = TextFormatter()

    formatted = formatter.format(result)

    if output_path:
        formatter.save(result, output_path)

    return formatted
