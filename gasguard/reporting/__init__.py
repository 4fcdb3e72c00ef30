"""
Reporting and output generation module.

Renders analysis results as text reports or JSON artifacts.
"""

from gasguard.reporting.formatter import (
    ReportFormatter,
    JSONFormatter,
    TextFormatter,
    format_result,
)

__all__ = [
    "ReportFormatter",
    "JSONFormatter",
    "TextFormatter",
    "format_result",
]
