"""
Analysis layer for model merging, reference resolution and structural checks.
"""

from .resolver import MergeResult, ResolutionResult, merge_models, resolve_references
from .schema_analyzer import (
    AnalysisOptions,
    analyze_schema,
    find_cycles,
    normalize_cycle,
    summarize,
)

__all__ = [
    "MergeResult",
    "ResolutionResult",
    "merge_models",
    "resolve_references",
    "AnalysisOptions",
    "analyze_schema",
    "find_cycles",
    "normalize_cycle",
    "summarize",
]
