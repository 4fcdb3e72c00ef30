"""
Language-specific analyzers.

This package contains the built-in analyzers. Each one owns a fixed rule
catalog and a set of line-oriented detectors; none of them builds a parse
tree.

Supported Languages:
    - Solidity: loop bounds, storage locals, loop micro-optimizations, visibility
    - Vyper: @external decorators on internal-looking functions
    - Rust: allocation and clone idioms, plus Soroban storage/loop/state rules
"""

from gasguard.analysis.languages.base_line_analyzer import BaseLineAnalyzer
from gasguard.analysis.languages.rust_analyzer import RustAnalyzer
from gasguard.analysis.languages.solidity_analyzer import SolidityAnalyzer
from gasguard.analysis.languages.vyper_analyzer import VyperAnalyzer

BUILTIN_ANALYZERS = (SolidityAnalyzer, VyperAnalyzer, RustAnalyzer)

__all__ = [
    "BaseLineAnalyzer",
    "RustAnalyzer",
    "SolidityAnalyzer",
    "VyperAnalyzer",
    "BUILTIN_ANALYZERS",
]
