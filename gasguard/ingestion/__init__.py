"""
Source ingestion for the command-line front end.

Reads contract files from disk into the mapping consumed by the registry.
"""

from gasguard.ingestion.collector import SourceCollector

__all__ = [
    "SourceCollector",
]
