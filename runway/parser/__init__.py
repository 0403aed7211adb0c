"""
Parser Module

Parses folders of DDL files into a resolved schema model and checks it.
Reorganized with clear layer separation for better maintainability:
shared helpers, statement parsers, per-file processing, and analysis.
The orchestration layer lives in ``runway.parser.core``.
"""

from .analysis import AnalysisOptions, analyze_schema, merge_models, resolve_references, summarize
from .parsers import ParserFactory, RegexParser, SQLglotParser
from .processing import FileDiscovery, build_model
from .shared import (
    ConfigurationError,
    FileDiscoveryError,
    LayoutError,
    OutputGenerationError,
    ParserError,
    ResolutionError,
    SQLParsingError,
)

__all__ = [
    "AnalysisOptions",
    "analyze_schema",
    "merge_models",
    "resolve_references",
    "summarize",
    "ParserFactory",
    "RegexParser",
    "SQLglotParser",
    "FileDiscovery",
    "build_model",
    "ConfigurationError",
    "FileDiscoveryError",
    "LayoutError",
    "OutputGenerationError",
    "ParserError",
    "ResolutionError",
    "SQLParsingError",
]
