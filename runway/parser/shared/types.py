"""
Common type definitions for the parser module.
"""

from pathlib import Path

# File paths
FilePath = str | Path

# One schema-definition file handed to the pipeline: (path, text)
SourceFile = tuple[str, str]

GraphCycles = list[list[str]]
