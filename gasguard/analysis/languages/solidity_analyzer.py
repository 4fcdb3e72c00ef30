"""
Solidity Analyzer Module.

Provides line-oriented gas heuristics for Solidity contracts: loop
bounds, storage versus memory locals, loop micro-optimizations and
function visibility.
"""

import logging
import re
from typing import List

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

WHILE_CONDITION = re.compile(r"\bwhile\s*\((.*)\)")
FOR_HEADER = re.compile(r"\bfor\s*\(([^;]*);([^;]*);")
UNCACHED_LENGTH = re.compile(r"\bfor\s*\([^)]*\.length\b[^)]*\)")
POSTFIX_INCREMENT = re.compile(r"\b[A-Za-z_]\w*\s*\+\+")
FOR_KEYWORD = re.compile(r"\bfor\s*\(")
STORAGE_LOCAL = re.compile(
    r"\b(?:string|bytes|[A-Za-z_]\w*\[\d*\])\s+storage\s+[A-Za-z_]\w*"
)
FUNCTION_KEYWORD = re.compile(r"\bfunction\b")
PUBLIC_FUNCTION = re.compile(r"\bfunction\s+([A-Za-z_]\w*)\s*\([^)]*\)[^{;]*\bpublic\b")


class SolidityAnalyzer(BaseLineAnalyzer):
    """Heuristic analyzer for Solidity source."""

    NAME = "SolidityAnalyzer"
    VERSION = "1.0.0"
    LANGUAGES = (Language.SOLIDITY,)

    RULES = (
        Rule(
            id="sol-001",
            name="Unbounded Loop",
            description="Loops without a literal bound can run out of gas as data grows",
            severity=Severity.HIGH,
            category="gas-optimization",
            tags=("loops", "gas", "performance"),
            documentation_url=docs_url("sol-001"),
            estimated_gas_impact=GasImpact(min=100, max=5000, typical=1000),
        ),
        Rule(
            id="sol-002",
            name="Use of storage when memory would suffice",
            description="Detects unnecessary use of storage variables",
            severity=Severity.HIGH,
            category="gas-optimization",
            tags=("storage", "memory", "gas"),
            documentation_url=docs_url("sol-002"),
            estimated_gas_impact=GasImpact(min=2000, max=20000, typical=5000),
        ),
        Rule(
            id="sol-003",
            name="Uncached array length in loop",
            description="Array length should be cached outside of loop to save gas",
            severity=Severity.MEDIUM,
            category="gas-optimization",
            tags=("loops", "arrays", "gas"),
            documentation_url=docs_url("sol-003"),
            estimated_gas_impact=GasImpact(min=50, max=500, typical=200),
        ),
        Rule(
            id="sol-004",
            name="Use of i++ instead of ++i",
            description="Using ++i is more gas efficient than i++",
            severity=Severity.LOW,
            category="gas-optimization",
            tags=("operators", "gas"),
            documentation_url=docs_url("sol-004"),
            estimated_gas_impact=GasImpact(min=5, max=20, typical=10),
        ),
        Rule(
            id="sol-005",
            name="Public function that could be external",
            description="Functions only called externally should use external visibility",
            severity=Severity.MEDIUM,
            category="gas-optimization",
            tags=("visibility", "gas"),
            documentation_url=docs_url("sol-005"),
            estimated_gas_impact=GasImpact(min=100, max=1000, typical=300),
        ),
    )

    CHECKS = (
        Check(
            rule_id="sol-001",
            detector="detect_unbounded_loops",
            message="Loop condition has no literal bound. Iteration count depends on runtime data",
            estimated_gas_savings=1000,
            suggested_fix=SuggestedFix(
                description="Bound the loop or process the collection in pages",
                code_snippet="for (uint256 i = start; i < start + PAGE_SIZE && i < length; ++i) { ... }",
                documentation_url=docs_url("sol-001"),
            ),
        ),
        Check(
            rule_id="sol-002",
            detector="detect_unnecessary_storage_usage",
            message="Variable uses storage but could use memory",
            estimated_gas_savings=5000,
            suggested_fix=SuggestedFix(
                description="Change storage variable to memory",
                documentation_url=docs_url("sol-002"),
            ),
        ),
        Check(
            rule_id="sol-003",
            detector="detect_uncached_array_length",
            message="Array length is not cached in loop. Cache it to save gas.",
            estimated_gas_savings=200,
            suggested_fix=SuggestedFix(
                description="Cache array length in a local variable before the loop",
                code_snippet="uint256 length = array.length;\nfor (uint256 i = 0; i < length; ++i) { ... }",
                documentation_url=docs_url("sol-003"),
            ),
        ),
        Check(
            rule_id="sol-004",
            detector="detect_inefficient_increments",
            message="Use ++i instead of i++ to save gas",
            estimated_gas_savings=10,
            suggested_fix=SuggestedFix(
                description="Replace i++ with ++i",
                code_snippet="for (uint256 i = 0; i < length; ++i)",
                documentation_url=docs_url("sol-004"),
            ),
        ),
        Check(
            rule_id="sol-005",
            detector="detect_public_functions_that_could_be_external",
            message="Function '{function}' is public but could be external to save gas",
            estimated_gas_savings=300,
            suggested_fix=SuggestedFix(
                description="Change function visibility from public to external",
                documentation_url=docs_url("sol-005"),
            ),
        ),
    )

    def describe(self) -> str:
        return "Solidity contracts"

    def detect_unbounded_loops(self, code: str) -> List[LineSpan]:
        spans = []
        for line in self.source_lines(code):
            conditions = []
            while_match = WHILE_CONDITION.search(line.code)
            if while_match:
                conditions.append(while_match.group(1))
            for_match = FOR_HEADER.search(line.code)
            if for_match:
                conditions.append(for_match.group(2))

            if any(not self.has_numeric_bound(condition) for condition in conditions):
                spans.append(LineSpan(line.number, line.number))
        return spans

    def detect_unnecessary_storage_usage(self, code: str) -> List[LineSpan]:
        return [
            LineSpan(line.number, line.number)
            for line in self.source_lines(code)
            if STORAGE_LOCAL.search(line.code)
            and not FUNCTION_KEYWORD.search(line.code)
        ]

    def detect_uncached_array_length(self, code: str) -> List[LineSpan]:
        return self.match_lines(code, UNCACHED_LENGTH)

    def detect_inefficient_increments(self, code: str) -> List[LineSpan]:
        return [
            LineSpan(line.number, line.number)
            for line in self.source_lines(code)
            if FOR_KEYWORD.search(line.code)
            and POSTFIX_INCREMENT.search(line.code)
        ]

    def detect_public_functions_that_could_be_external(self, code: str) -> List[LineSpan]:
        """
        Flag public functions with no internal call site in the file.

        A call preceded by ``.`` (``this.f()``, ``other.f()``) is an
        external call and does not count as internal use.
        """
        lines = self.source_lines(code)
        spans = []

        for line in lines:
            declaration = PUBLIC_FUNCTION.search(line.code)
            if not declaration:
                continue

            name = declaration.group(1)
            call = re.compile(rf"(?<![\w.]){re.escape(name)}\s*\(")
            redeclaration = re.compile(rf"\bfunction\s+{re.escape(name)}\b")
            called_internally = any(
                call.search(other.code) and not redeclaration.search(other.code)
                for other in lines
                if other.number != line.number
            )
            if not called_internally:
                spans.append(LineSpan(line.number, line.number, {"function": name}))

        return spans
