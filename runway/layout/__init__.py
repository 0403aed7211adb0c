"""
Layered auto-layout of schema diagrams.
"""

from .engine import GroupBox, LayoutEngine, LayoutOptions, LayoutResult
from .graph import LayoutGraph, LayoutNode, build_layout_graph, default_group_key, node_height
from .layered import DIRECTIONS, Drawing, LayeredLayout

__all__ = [
    "DIRECTIONS",
    "Drawing",
    "GroupBox",
    "LayeredLayout",
    "LayoutEngine",
    "LayoutGraph",
    "LayoutNode",
    "LayoutOptions",
    "LayoutResult",
    "build_layout_graph",
    "default_group_key",
    "node_height",
]
