"""
GasGuard Engine.

Heuristic static analysis of Solidity, Vyper and Rust (including Soroban)
contract sources, reporting gas-inefficiency findings with estimated
savings and suggested fixes.
"""

__version__ = "1.0.0"
__author__ = "GasGuard"
