"""
Vyper Analyzer Module.

Flags Vyper functions whose ``@external`` decorator looks accidental:
functions following the leading-underscore internal naming convention,
and helper-style functions that are only reached through ``self.`` calls.
"""

import logging
import re
from dataclasses import dataclass, field
from typing import List, Set

from gasguard.analysis.analyzer import Check, LineSpan, docs_url
from gasguard.analysis.languages.base_line_analyzer import BaseLineAnalyzer
from gasguard.analysis.models import (
    GasImpact,
    Language,
    Rule,
    Severity,
    SuggestedFix,
)

logger = logging.getLogger(__name__)

DECORATOR = re.compile(r"^@(\w+)")
FUNCTION_DEF = re.compile(r"^def\s+(\w+)\s*\(")
SELF_CALL = re.compile(r"\bself\.(\w+)\s*\(")

ENTRY_POINTS = frozenset({"__init__", "__default__", "initialize", "setup"})
HELPER_PATTERNS = (
    "helper",
    "util",
    "compute",
    "calculate",
    "validate",
    "check",
    "get_",
    "set_",
    "update_",
    "process_",
    "handle_",
)


@dataclass
class VyperFunction:
    """A ``def`` with the decorators stacked above it."""
    name: str
    decorators: List[str] = field(default_factory=list)
    start_line: int = 0
    def_line: int = 0

    @property
    def is_external(self) -> bool:
        return "external" in self.decorators

    def span(self) -> LineSpan:
        return LineSpan(self.start_line, self.def_line, {"function": self.name})


def is_internal_name(name: str) -> bool:
    """Single leading underscore marks internal use; dunders are excluded."""
    return name.startswith("_") and not name.startswith("__")


def looks_like_helper(name: str) -> bool:
    lowered = name.lower()
    return any(pattern in lowered for pattern in HELPER_PATTERNS)


class VyperAnalyzer(BaseLineAnalyzer):
    """Heuristic analyzer for Vyper source."""

    NAME = "VyperAnalyzer"
    VERSION = "1.0.0"
    LANGUAGES = (Language.VYPER,)
    LINE_COMMENT = "#"
    BLOCK_COMMENTS = False

    RULES = (
        Rule(
            id="vyper-001",
            name="Redundant @external on internal function",
            description=(
                "Functions following the internal naming convention (_prefix) "
                "should not be marked @external"
            ),
            severity=Severity.MEDIUM,
            category="gas-optimization",
            tags=("visibility", "decorators", "security"),
            documentation_url=docs_url("vyper-001"),
            estimated_gas_impact=GasImpact(min=100, max=500, typical=200),
        ),
        Rule(
            id="vyper-002",
            name="External helper only called internally",
            description=(
                "Helper functions reached through self. calls are usually "
                "meant to be @internal"
            ),
            severity=Severity.LOW,
            category="gas-optimization",
            tags=("visibility", "decorators"),
            documentation_url=docs_url("vyper-002"),
            estimated_gas_impact=GasImpact(min=50, max=400, typical=150),
        ),
    )

    CHECKS = (
        Check(
            rule_id="vyper-001",
            detector="detect_external_internal_naming",
            message=(
                "Function '{function}' is marked @external but uses internal "
                "naming convention (_prefix)"
            ),
            estimated_gas_savings=200,
            suggested_fix=SuggestedFix(
                description="Change @external to @internal",
                code_snippet="@internal\ndef _helper() -> uint256:\n    ...",
                documentation_url=docs_url("vyper-001"),
            ),
        ),
        Check(
            rule_id="vyper-002",
            detector="detect_external_helpers_called_internally",
            message=(
                "Function '{function}' is marked @external but appears to only "
                "be called internally (via self.{function}())"
            ),
            estimated_gas_savings=150,
            suggested_fix=SuggestedFix(
                description=(
                    "Change @external to @internal if the function is not part "
                    "of the contract ABI"
                ),
                documentation_url=docs_url("vyper-002"),
            ),
        ),
    )

    def describe(self) -> str:
        return "Vyper contracts"

    def parse_functions(self, code: str) -> List[VyperFunction]:
        """Collect ``def`` lines together with their decorator stack."""
        functions = []
        decorators: List[str] = []
        decorator_start = None

        for line in self.source_lines(code):
            stripped = line.code.strip()

            decorator = DECORATOR.match(stripped)
            if decorator:
                if not decorators:
                    decorator_start = line.number
                decorators.append(decorator.group(1))
                continue

            definition = FUNCTION_DEF.match(stripped)
            if definition:
                functions.append(VyperFunction(
                    name=definition.group(1),
                    decorators=decorators,
                    start_line=decorator_start or line.number,
                    def_line=line.number,
                ))
                decorators = []
                decorator_start = None

        return functions

    def internally_called(self, code: str) -> Set[str]:
        return {
            match.group(1)
            for line in self.source_lines(code)
            for match in SELF_CALL.finditer(line.code)
        }

    def detect_external_internal_naming(self, code: str) -> List[LineSpan]:
        return [
            function.span()
            for function in self.parse_functions(code)
            if function.is_external and is_internal_name(function.name)
        ]

    def detect_external_helpers_called_internally(self, code: str) -> List[LineSpan]:
        called = self.internally_called(code)
        return [
            function.span()
            for function in self.parse_functions(code)
            if function.is_external
            and not is_internal_name(function.name)
            and function.name in called
            and function.name not in ENTRY_POINTS
            and looks_like_helper(function.name)
        ]
