"""
Rust Analyzer Module.

Provides line-oriented gas heuristics for Rust smart contracts. General
Rust allocation and copy idioms apply to every file; storage, loop, state
and contract-structure rules specific to the Soroban runtime only run when
the source carries a Soroban marker (``soroban_sdk`` import or
``#[contract]`` attributes).
"""

import logging
import re
from typing import List, NamedTuple, Optional

from gasguard.analysis.analyzer import Check, LineSpan, docs_url
from gasguard.analysis.languages.base_line_analyzer import BaseLineAnalyzer, SourceLine
from gasguard.analysis.models import (
    GasImpact,
    Language,
    Rule,
    Severity,
    SuggestedFix,
)

logger = logging.getLogger(__name__)

SOROBAN_MARKER = re.compile(r"soroban_sdk|#\[\s*contract(?:impl)?\s*\]")

STRING_NEW = re.compile(r"\bString::new\(\)")
PUSH_STR = re.compile(r"\.push_str\s*\(")
VEC_NEW = re.compile(r"\bVec::new\(\)")
VEC_PUSH = re.compile(r"\.push\s*\(")
CLONE_CALL = re.compile(r"\.clone\(\)")
STRING_BUILDING = re.compile(r"\.to_string\(\)|\bString::from\(|\bformat!\s*\(")

STORAGE_GET = re.compile(
    r"storage\(\)\s*\.\s*(?:instance|persistent|temporary)\(\)\s*"
    r"\.\s*get(?:::<[^>]*>)?\(\s*&\s*([A-Za-z_][\w:]*)\s*\)"
)
STORAGE_ACCESS = re.compile(
    r"storage\(\)\s*\.\s*(?:instance|persistent|temporary)\(\)\s*"
    r"\.\s*(?:get|set|has|update)\b"
)
WHILE_LOOP = re.compile(r"\bwhile\b(.*)")
BARE_LOOP = re.compile(r"\bloop\s*\{")
STORAGE_ITERATION = re.compile(r"\bfor\b.*\bstorage\(\).*\biter")
# ``impl Trait for Type`` has no ``in``, so it is not taken for a loop
FOR_LOOP = re.compile(r"\bfor\b.*\bin\b")
LOOP_HEADER = re.compile(r"\bfor\b.*\bin\b|\bwhile\b|\bloop\s*\{")

CONTRACT_TYPE = re.compile(r"#\[\s*contracttype\s*\]")
CONTRACT_IMPL = re.compile(r"#\[\s*contractimpl\s*\]")
STRUCT_OPEN = re.compile(r"\bstruct\s+\w+\s*\{")
STRUCT_FIELD = re.compile(
    r"^\s*(?:pub(?:\([^)]*\))?\s+)?([a-z_][A-Za-z0-9_]*)\s*:\s*(.+?)\s*,?\s*$"
)

PUBLIC_FN = re.compile(r"\bpub\s+fn\s+(\w+)")
CONSTRUCTOR_FN = re.compile(r"\bfn\s+(?:new|__constructor|\w+_init)\s*[<(]")
STATE_CHANGING_VERBS = frozenset({"transfer", "mint", "burn", "set"})
OVERSIZED_INTEGERS = frozenset({"u128", "i128"})
ADMIN_FIELD_HINTS = ("admin", "owner")
ADMIN_KEY = re.compile(r"\b(?:Admin|Owner)\b")

# Lines scanned for the end of a multi-line function signature
SIGNATURE_LINES = 6


class ContractField(NamedTuple):
    """Field of a ``#[contracttype]`` struct."""
    name: str
    type_name: str
    line: int


class RustAnalyzer(BaseLineAnalyzer):
    """
    Heuristic analyzer for Rust and Soroban contract source.

    Detects:
        - String and Vec construction without capacity before appends
        - Explicit ``.clone()`` calls
        - Repeated Soroban storage reads of one key (file-wide)
        - Loops without a literal bound and loops over storage iterators
        - ``#[contracttype]`` fields referenced nowhere else, 128-bit
          integers and String-typed fields
        - String building, storage calls inside loops
        - Contracts without a constructor or an admin pattern
        - State-changing entry points that do not return Result
    """

    NAME = "RustAnalyzer"
    VERSION = "1.0.0"
    LANGUAGES = (Language.RUST,)
    QUOTE_CHARS = ('"',)
    CHAR_LITERALS = True

    RULES = (
        Rule(
            id="rust-001",
            name="Inefficient String Concatenation",
            description="Detects inefficient string concatenation that could use String::with_capacity",
            severity=Severity.MEDIUM,
            category="gas-optimization",
            tags=("strings", "memory", "performance"),
            documentation_url=docs_url("rust-001"),
            estimated_gas_impact=GasImpact(min=50, max=500, typical=150),
        ),
        Rule(
            id="rust-002",
            name="Unnecessary Clone",
            description="Detects .clone() calls that duplicate data where a reference may suffice",
            severity=Severity.HIGH,
            category="gas-optimization",
            tags=("memory", "clone", "performance"),
            documentation_url=docs_url("rust-002"),
            estimated_gas_impact=GasImpact(min=100, max=2000, typical=500),
        ),
        Rule(
            id="rust-003",
            name="Vec allocation without capacity",
            description="Vec::new() followed by pushes can cause multiple reallocations",
            severity=Severity.MEDIUM,
            category="gas-optimization",
            tags=("collections", "memory", "performance"),
            documentation_url=docs_url("rust-003"),
            estimated_gas_impact=GasImpact(min=200, max=1500, typical=600),
        ),
        Rule(
            id="soroban-001",
            name="Inefficient Storage Access",
            description="Multiple storage reads for the same key in Soroban contracts",
            severity=Severity.HIGH,
            category="gas-optimization",
            tags=("soroban", "storage", "ledger"),
            documentation_url=docs_url("soroban-001"),
            estimated_gas_impact=GasImpact(min=500, max=5000, typical=2000),
        ),
        Rule(
            id="soroban-002",
            name="Unbounded Loop in Contract",
            description="Loop without clear bounds can cause CPU limit exhaustion",
            severity=Severity.CRITICAL,
            category="security",
            tags=("soroban", "loops", "cpu-limits"),
            documentation_url=docs_url("soroban-002"),
            estimated_gas_impact=GasImpact(min=1000, max=10000, typical=5000),
        ),
        Rule(
            id="soroban-003",
            name="Unused State Variable",
            description="Contract type field that is declared but never referenced",
            severity=Severity.LOW,
            category="gas-optimization",
            tags=("soroban", "storage", "dead-code"),
            documentation_url=docs_url("soroban-003"),
            estimated_gas_impact=GasImpact(min=1000, max=5000, typical=2500),
        ),
        Rule(
            id="soroban-004",
            name="Expensive String Operations",
            description="String building increases gas and ledger storage costs in contracts",
            severity=Severity.MEDIUM,
            category="gas-optimization",
            tags=("soroban", "strings", "storage"),
            documentation_url=docs_url("soroban-004"),
            estimated_gas_impact=GasImpact(min=100, max=1000, typical=300),
        ),
        Rule(
            id="soroban-005",
            name="Inefficient Integer Types",
            description="Contract type field uses a 128-bit integer where a smaller type may do",
            severity=Severity.INFO,
            category="gas-optimization",
            tags=("soroban", "storage", "types"),
            documentation_url=docs_url("soroban-005"),
            estimated_gas_impact=GasImpact(min=50, max=500, typical=100),
        ),
        Rule(
            id="soroban-006",
            name="String Instead of Symbol",
            description="Contract type field stores a String where a Symbol may suffice",
            severity=Severity.INFO,
            category="gas-optimization",
            tags=("soroban", "storage", "strings"),
            documentation_url=docs_url("soroban-006"),
            estimated_gas_impact=GasImpact(min=100, max=1000, typical=400),
        ),
        Rule(
            id="soroban-007",
            name="Missing Constructor",
            description="Contract implementation has no constructor function for initialization",
            severity=Severity.LOW,
            category="best-practice",
            tags=("soroban", "initialization"),
            documentation_url=docs_url("soroban-007"),
        ),
        Rule(
            id="soroban-008",
            name="Admin Pattern Suggestion",
            description="Contract state has no admin or owner field for access control",
            severity=Severity.INFO,
            category="best-practice",
            tags=("soroban", "access-control"),
            documentation_url=docs_url("soroban-008"),
        ),
        Rule(
            id="soroban-009",
            name="Missing Error Handling",
            description="State-changing contract function does not return Result",
            severity=Severity.MEDIUM,
            category="best-practice",
            tags=("soroban", "errors"),
            documentation_url=docs_url("soroban-009"),
        ),
        Rule(
            id="soroban-010",
            name="Storage Access Inside Loop",
            description="Ledger storage is read or written on every loop iteration",
            severity=Severity.HIGH,
            category="gas-optimization",
            tags=("soroban", "storage", "loops"),
            documentation_url=docs_url("soroban-010"),
            estimated_gas_impact=GasImpact(min=500, max=10000, typical=3000),
        ),
    )

    CHECKS = (
        Check(
            rule_id="rust-001",
            detector="detect_inefficient_string_ops",
            message="Inefficient string concatenation. Consider using String::with_capacity",
            estimated_gas_savings=150,
            suggested_fix=SuggestedFix(
                description="Pre-allocate string capacity to avoid reallocations",
                code_snippet=(
                    "let mut result = String::with_capacity(estimated_size);\n"
                    "result.push_str(&str1);\n"
                    "result.push_str(&str2);"
                ),
                documentation_url=docs_url("rust-001"),
            ),
        ),
        Check(
            rule_id="rust-002",
            detector="detect_unnecessary_clones",
            message="Unnecessary .clone() detected. Consider using references",
            estimated_gas_savings=500,
            suggested_fix=SuggestedFix(
                description="Use references (&) instead of cloning when possible",
                documentation_url=docs_url("rust-002"),
            ),
        ),
        Check(
            rule_id="rust-003",
            detector="detect_vec_without_capacity",
            message="Vec created without capacity. Consider using Vec::with_capacity",
            estimated_gas_savings=600,
            suggested_fix=SuggestedFix(
                description="Pre-allocate Vec capacity to avoid reallocations",
                code_snippet="let mut vec = Vec::with_capacity(expected_size);",
                documentation_url=docs_url("rust-003"),
            ),
        ),
        Check(
            rule_id="soroban-001",
            detector="detect_repeated_storage_reads",
            message="Storage key '{key}' is read {occurrences} times. Cache the value",
            estimated_gas_savings=2000,
            suggested_fix=SuggestedFix(
                description="Cache storage value in a local variable",
                code_snippet=(
                    "let cached_value = env.storage().instance().get(&key);\n"
                    "// Use cached_value multiple times"
                ),
                documentation_url=docs_url("soroban-001"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-002",
            detector="detect_unbounded_loops",
            message="Unbounded loop detected. This can cause CPU limit exhaustion",
            estimated_gas_savings=5000,
            suggested_fix=SuggestedFix(
                description="Add clear bounds to loops or use pagination",
                documentation_url=docs_url("soroban-002"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-003",
            detector="detect_unused_state_variables",
            message="State variable '{field}' appears to be unused",
            estimated_gas_savings=2500,
            suggested_fix=SuggestedFix(
                description="Remove the unused field to save ledger storage costs",
                documentation_url=docs_url("soroban-003"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-004",
            detector="detect_expensive_string_ops",
            message="Expensive string operation in contract code",
            estimated_gas_savings=300,
            suggested_fix=SuggestedFix(
                description="Use Symbol or Bytes for fixed data, or minimize string operations",
                code_snippet='let key = symbol_short!("balance");',
                documentation_url=docs_url("soroban-004"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-005",
            detector="detect_oversized_integer_fields",
            message="Field '{field}' uses {type} which may be unnecessarily large",
            estimated_gas_savings=100,
            suggested_fix=SuggestedFix(
                description="Use a smaller integer type like u64 or u32 if the range permits",
                documentation_url=docs_url("soroban-005"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-006",
            detector="detect_string_fields",
            message="Field '{field}' uses String type",
            estimated_gas_savings=400,
            suggested_fix=SuggestedFix(
                description="Use Symbol for fixed string values to save storage costs",
                documentation_url=docs_url("soroban-006"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-007",
            detector="detect_missing_constructor",
            message="Contract lacks a constructor function for initialization",
            estimated_gas_savings=None,
            suggested_fix=SuggestedFix(
                description="Add a 'new' function that initializes the contract state",
                code_snippet="pub fn new(env: Env, admin: Address) {\n    // store initial state\n}",
                documentation_url=docs_url("soroban-007"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-008",
            detector="detect_missing_admin",
            message="Consider adding an admin/owner field for access control",
            estimated_gas_savings=None,
            suggested_fix=SuggestedFix(
                description="Add an 'admin: Address' field to the contract state",
                documentation_url=docs_url("soroban-008"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-009",
            detector="detect_missing_error_handling",
            message="Function '{function}' should return Result for proper error handling",
            estimated_gas_savings=None,
            suggested_fix=SuggestedFix(
                description="Return Result<(), Error> so failed operations are reported",
                documentation_url=docs_url("soroban-009"),
            ),
            dialect_only=True,
        ),
        Check(
            rule_id="soroban-010",
            detector="detect_storage_access_in_loops",
            message="Storage access inside loop. Batch reads or cache the value before the loop",
            estimated_gas_savings=3000,
            suggested_fix=SuggestedFix(
                description="Read storage once before the loop and write back once after it",
                documentation_url=docs_url("soroban-010"),
            ),
            dialect_only=True,
        ),
    )

    def describe(self) -> str:
        return "Rust contracts, with Soroban-specific storage, loop and structure rules"

    def detect_dialect(self, code: str) -> bool:
        """Soroban contracts import soroban_sdk or use #[contract] attributes."""
        return bool(SOROBAN_MARKER.search(code))

    def contract_fields(self, lines: List[SourceLine]) -> List[ContractField]:
        """Fields of every ``#[contracttype]`` struct, in declaration order."""
        fields = []
        pending_type = False
        in_struct = False

        for line in lines:
            if in_struct:
                if "}" in line.code:
                    in_struct = False
                    continue
                field_match = STRUCT_FIELD.match(line.code)
                if field_match:
                    fields.append(ContractField(
                        field_match.group(1), field_match.group(2), line.number
                    ))
            elif CONTRACT_TYPE.search(line.code):
                pending_type = True
            elif pending_type and STRUCT_OPEN.search(line.code):
                pending_type = False
                in_struct = "}" not in line.code
            elif pending_type and line.code.strip() and not line.code.strip().startswith("#["):
                pending_type = False

        return fields

    @staticmethod
    def contract_impl_line(lines: List[SourceLine]) -> Optional[int]:
        for line in lines:
            if CONTRACT_IMPL.search(line.code):
                return line.number
        return None

    @staticmethod
    def signature_text(lines: List[SourceLine], index: int) -> str:
        """Function signature starting at ``lines[index]``, without the body."""
        parts = []
        for line in lines[index:index + SIGNATURE_LINES]:
            parts.append(line.code)
            if "{" in line.code or ";" in line.code:
                break
        return " ".join(parts).partition("{")[0]

    def detect_inefficient_string_ops(self, code: str) -> List[LineSpan]:
        return self.construction_followed_by(code, STRING_NEW, PUSH_STR)

    def detect_unnecessary_clones(self, code: str) -> List[LineSpan]:
        return self.match_lines(code, CLONE_CALL)

    def detect_vec_without_capacity(self, code: str) -> List[LineSpan]:
        return self.construction_followed_by(code, VEC_NEW, VEC_PUSH)

    def detect_repeated_storage_reads(self, code: str) -> List[LineSpan]:
        """
        Group storage reads by key across the whole file.

        Reads are not scoped to functions; a key read once in each of two
        functions is still reported. Each repeated key yields one span from
        its first to its last read.
        """
        spans = []
        for key, line_numbers in self.group_occurrences(code, STORAGE_GET).items():
            if len(line_numbers) > 1:
                spans.append(LineSpan(
                    line_numbers[0],
                    line_numbers[-1],
                    {"key": key, "occurrences": len(line_numbers)},
                ))
        return sorted(spans, key=lambda span: span.start_line)

    def detect_unbounded_loops(self, code: str) -> List[LineSpan]:
        spans = []
        for line in self.source_lines(code):
            while_match = WHILE_LOOP.search(line.code)
            unbounded = (
                (while_match and not self.has_numeric_bound(while_match.group(1)))
                or BARE_LOOP.search(line.code)
                or STORAGE_ITERATION.search(line.code)
            )
            if unbounded:
                spans.append(LineSpan(line.number, line.number))
        return spans

    def detect_unused_state_variables(self, code: str) -> List[LineSpan]:
        lines = self.source_lines(code)
        fields = self.contract_fields(lines)
        if not fields:
            return []

        body = "\n".join(line.code for line in lines)
        spans = []
        for field in fields:
            occurrences = len(re.findall(rf"\b{re.escape(field.name)}\b", body))
            if occurrences <= 1:
                spans.append(LineSpan(field.line, field.line, {"field": field.name}))
        return spans

    def detect_expensive_string_ops(self, code: str) -> List[LineSpan]:
        return self.match_lines(code, STRING_BUILDING)

    def detect_oversized_integer_fields(self, code: str) -> List[LineSpan]:
        return [
            LineSpan(field.line, field.line, {"field": field.name, "type": field.type_name})
            for field in self.contract_fields(self.source_lines(code))
            if field.type_name in OVERSIZED_INTEGERS
        ]

    def detect_string_fields(self, code: str) -> List[LineSpan]:
        return [
            LineSpan(field.line, field.line, {"field": field.name})
            for field in self.contract_fields(self.source_lines(code))
            if field.type_name == "String" or field.type_name.endswith("::String")
        ]

    def detect_missing_constructor(self, code: str) -> List[LineSpan]:
        """Report the ``#[contractimpl]`` line when no constructor is defined."""
        lines = self.source_lines(code)
        impl_line = self.contract_impl_line(lines)
        if impl_line is None:
            return []
        if any(CONSTRUCTOR_FN.search(line.code) for line in lines):
            return []
        return [LineSpan(impl_line, impl_line)]

    def detect_missing_admin(self, code: str) -> List[LineSpan]:
        """
        Report contracts whose state has no admin or owner.

        An ``admin``/``owner`` contract type field, any ``Address`` field,
        or an ``Admin``/``Owner`` storage key counts as an admin pattern.
        """
        lines = self.source_lines(code)
        impl_line = self.contract_impl_line(lines)
        if impl_line is None:
            return []

        for field in self.contract_fields(lines):
            if any(hint in field.name for hint in ADMIN_FIELD_HINTS):
                return []
            if "Address" in field.type_name:
                return []
        if any(ADMIN_KEY.search(line.code) for line in lines):
            return []
        return [LineSpan(impl_line, impl_line)]

    def detect_missing_error_handling(self, code: str) -> List[LineSpan]:
        """Public transfer/mint/burn/set functions must return a Result."""
        lines = self.source_lines(code)
        spans = []
        for index, line in enumerate(lines):
            fn_match = PUBLIC_FN.search(line.code)
            if not fn_match:
                continue
            name = fn_match.group(1)
            if not STATE_CHANGING_VERBS.intersection(name.lower().split("_")):
                continue
            returns = self.signature_text(lines, index).partition("->")[2]
            if "Result" not in returns:
                spans.append(LineSpan(line.number, line.number, {"function": name}))
        return spans

    def detect_storage_access_in_loops(self, code: str) -> List[LineSpan]:
        """
        Report storage calls made inside a loop body or a while condition.

        Loop bodies are tracked by brace depth; the iterator expression of
        a ``for`` header runs once and is not considered part of the loop.
        """
        spans = []
        depth = 0
        loop_depths: List[int] = []

        for line in self.source_lines(code):
            code_in_loop = line.code
            if LOOP_HEADER.search(line.code):
                loop_depths.append(depth)
                if FOR_LOOP.search(line.code):
                    code_in_loop = line.code.partition("{")[2]

            if loop_depths and STORAGE_ACCESS.search(code_in_loop):
                spans.append(LineSpan(line.number, line.number))

            depth += line.code.count("{") - line.code.count("}")
            if "}" in line.code:
                while loop_depths and depth <= loop_depths[-1]:
                    loop_depths.pop()

        return spans
