"""
Shared utilities and common types for the parser module.
"""

from .constants import *
from .datatypes import normalize_data_type
from .exceptions import *
from .identifiers import (
    clean_identifier,
    collapse_whitespace,
    split_identifier_list,
    split_statements,
    split_top_level,
    strip_comments,
)
from .types import *

__all__ = [
    # Types
    "FilePath",
    "SourceFile",
    "GraphCycles",
    # Exceptions
    "ParserError",
    "SQLParsingError",
    "FileDiscoveryError",
    "ResolutionError",
    "LayoutError",
    "OutputGenerationError",
    "ConfigurationError",
    # Constants
    "SUPPORTED_SQL_EXTENSIONS",
    "PARSER_STRATEGIES",
    "DEFAULT_DIALECT",
    # Utilities
    "clean_identifier",
    "collapse_whitespace",
    "normalize_data_type",
    "split_identifier_list",
    "split_statements",
    "split_top_level",
    "strip_comments",
]
