"""
Base Line Analyzer Module.

Provides the base class for line-oriented heuristic analyzers. Detectors
work on numbered source lines with comments stripped, so commented-out
code is never reported. This is a textual approximation; no parse tree
is built.
"""

import logging
import re
from typing import Dict, List, NamedTuple, Optional, Tuple

from gasguard.analysis.analyzer import BaseAnalyzer, LineSpan

logger = logging.getLogger(__name__)

NUMERIC_BOUND_PATTERN = re.compile(
    r"[\w\])]\s*(?:<=?|>=?)\s*(?:0x[0-9a-fA-F_]+|\d[\d_]*)\b"
)

# Rust char literals such as '"' or '\u{1F600}'; a lone quote is a lifetime
CHAR_LITERAL_PATTERN = re.compile(r"'(?:\\u\{[0-9a-fA-F]+\}|\\.|[^\\'\n])'")


class SourceLine(NamedTuple):
    """A source line with its 1-based number and comment-free code."""
    number: int
    text: str
    code: str


def strip_comments(
    text: str,
    in_block: bool,
    line_marker: str = "//",
    block_comments: bool = True,
    quote_chars: Tuple[str, ...] = ("'", '"'),
    char_literals: bool = False,
) -> Tuple[str, bool]:
    """
    Remove comments from one line of source.

    Args:
        text: Raw line text.
        in_block: Whether a block comment is open at the start of the line.
        line_marker: Line comment marker, e.g. ``//`` or ``#``.
        block_comments: Whether ``/* ... */`` comments exist in the language.
        quote_chars: Characters opening a string literal.
        char_literals: Whether single-quoted character literals exist, in
            which case a quote that does not close one is left as plain code.

    Returns:
        Tuple of (code without comments, block comment still open).
    """
    result = []
    index = 0
    quote: Optional[str] = None
    length = len(text)

    while index < length:
        if in_block:
            end = text.find("*/", index)
            if end == -1:
                return "".join(result), True
            index = end + 2
            in_block = False
            continue

        char = text[index]

        if quote:
            result.append(char)
            if char == "\\" and index + 1 < length:
                result.append(text[index + 1])
                index += 2
                continue
            if char == quote:
                quote = None
            index += 1
            continue

        if char_literals and char == "'":
            literal = CHAR_LITERAL_PATTERN.match(text, index)
            if literal:
                result.append(literal.group(0))
                index = literal.end()
                continue

        if char in quote_chars:
            quote = char
            result.append(char)
            index += 1
            continue

        if text.startswith(line_marker, index):
            break

        if block_comments and text.startswith("/*", index):
            in_block = True
            index += 2
            continue

        result.append(char)
        index += 1

    return "".join(result), in_block


class BaseLineAnalyzer(BaseAnalyzer):
    """
    Base class for analyzers whose detectors scan source line by line.

    Subclasses set ``LINE_COMMENT`` and ``BLOCK_COMMENTS`` for their
    language and implement detector methods referenced by ``CHECKS``.
    """

    LINE_COMMENT: str = "//"
    BLOCK_COMMENTS: bool = True
    QUOTE_CHARS: Tuple[str, ...] = ("'", '"')
    CHAR_LITERALS: bool = False

    # Lines inspected after a construction call when looking for appends
    LOOKAHEAD_LINES: int = 4

    def source_lines(self, code: str) -> List[SourceLine]:
        """Split source into numbered lines with comments removed."""
        lines = []
        in_block = False
        for index, text in enumerate(code.split("\n")):
            stripped, in_block = strip_comments(
                text, in_block, self.LINE_COMMENT, self.BLOCK_COMMENTS,
                self.QUOTE_CHARS, self.CHAR_LITERALS,
            )
            lines.append(SourceLine(number=index + 1, text=text, code=stripped))
        return lines

    def match_lines(self, code: str, pattern: "re.Pattern") -> List[LineSpan]:
        """Single-line spans for every line whose code matches a pattern."""
        return [
            LineSpan(line.number, line.number)
            for line in self.source_lines(code)
            if pattern.search(line.code)
        ]

    def construction_followed_by(
        self,
        code: str,
        construction: "re.Pattern",
        follow_up: "re.Pattern",
    ) -> List[LineSpan]:
        """
        Flag construction calls followed by append operations.

        A line matching ``construction`` is reported when one of the next
        ``LOOKAHEAD_LINES`` lines matches ``follow_up``.
        """
        lines = self.source_lines(code)
        spans = []
        for index, line in enumerate(lines):
            if not construction.search(line.code):
                continue
            window = lines[index + 1:index + 1 + self.LOOKAHEAD_LINES]
            if any(follow_up.search(next_line.code) for next_line in window):
                spans.append(LineSpan(line.number, line.number))
        return spans

    def group_occurrences(
        self,
        code: str,
        pattern: "re.Pattern",
    ) -> Dict[str, List[int]]:
        """Group line numbers by the first capture group of a pattern."""
        occurrences: Dict[str, List[int]] = {}
        for line in self.source_lines(code):
            for match in pattern.finditer(line.code):
                occurrences.setdefault(match.group(1), []).append(line.number)
        return occurrences

    @staticmethod
    def has_numeric_bound(condition: str) -> bool:
        """Whether a loop condition compares against a literal number."""
        return bool(NUMERIC_BOUND_PATTERN.search(condition))
