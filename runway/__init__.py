"""
Runway Module

Parses folders of DDL files into a cross-referenced schema model, checks the
model for structural problems and computes diagram layouts.
"""

from .config import ConfigManager, RunwayConfig, load_config
from .layout import LayoutEngine, LayoutOptions, LayoutResult
from .parser.analysis import AnalysisOptions, analyze_schema
from .parser.core import ParseOptions, ParseResult, SchemaParser, parse_files

__all__ = [
    "SchemaParser",
    "ParseOptions",
    "ParseResult",
    "parse_files",
    "AnalysisOptions",
    "analyze_schema",
    "LayoutEngine",
    "LayoutOptions",
    "LayoutResult",
    "ConfigManager",
    "RunwayConfig",
    "load_config",
]
