"""
Output layer for JSON and YAML export.
"""

from .json_exporter import OUTPUT_FORMATS, JSONExporter

__all__ = [
    "JSONExporter",
    "OUTPUT_FORMATS",
]
