"""
Processing layer for file discovery and per-file model building.
"""

from .file_discovery import FileDiscovery
from .model_builder import FileModel, build_column, build_foreign_key, build_model, build_table, format_default

__all__ = [
    "FileDiscovery",
    "FileModel",
    "build_model",
    "build_table",
    "build_column",
    "build_foreign_key",
    "format_default",
]
