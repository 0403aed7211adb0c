"""
Core layer for high-level orchestration and coordination.
"""

from .orchestrator import ParseOptions, ParseResult, SchemaParser, parse_files

__all__ = [
    "ParseOptions",
    "ParseResult",
    "SchemaParser",
    "parse_files",
]
