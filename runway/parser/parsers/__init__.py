"""
Parsers layer for DDL statement parsing.
"""

from .base import BaseParser
from .parser_factory import FallbackParser, ParserFactory
from .regex_parser import RegexParser
from .sqlglot_parser import SQLglotParser

__all__ = [
    "BaseParser",
    "SQLglotParser",
    "RegexParser",
    "FallbackParser",
    "ParserFactory",
]
