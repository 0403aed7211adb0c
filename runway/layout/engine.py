"""
Layout engine assigning positions to table and enum nodes.

In flat mode the whole graph is drawn by one layered layout. In grouped
mode every group is drawn on its own, restricted to its internal edges, and
the group boxes are then drawn as super-nodes connected by the aggregated
cross-group edges.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from runway.parser.shared.exceptions import LayoutError
from runway.typing import EnumType, SchemaModel, Table

from .graph import (
    DEFAULT_ENUM_WIDTH,
    DEFAULT_HEADER_HEIGHT,
    DEFAULT_NODE_PADDING,
    DEFAULT_ROW_HEIGHT,
    DEFAULT_TABLE_WIDTH,
    LayoutGraph,
    LayoutNode,
    build_layout_graph,
    default_group_key,
)
from .layered import Drawing, LayeredLayout

logger = logging.getLogger(__name__)

Position = tuple[float, float]


@dataclass
class LayoutOptions:
    """Spacing, sizing and mode parameters of the layout engine."""

    direction: str = "LR"
    table_width: float = DEFAULT_TABLE_WIDTH
    enum_width: float = DEFAULT_ENUM_WIDTH
    header_height: float = DEFAULT_HEADER_HEIGHT
    row_height: float = DEFAULT_ROW_HEIGHT
    node_padding: float = DEFAULT_NODE_PADDING
    node_sep: float = 60
    rank_sep: float = 120
    margin_x: float = 20
    margin_y: float = 20
    grouped: bool = False
    group_header_height: float = 32
    group_padding: float = 20


@dataclass(frozen=True)
class GroupBox:
    key: str
    x: float
    y: float
    width: float
    height: float
    members: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
            "members": list(self.members),
        }


@dataclass
class LayoutResult:
    """Node positions (top-left corners) and sizes keyed by node id."""

    positions: dict[str, Position] = field(default_factory=dict)
    sizes: dict[str, tuple[float, float]] = field(default_factory=dict)
    groups: dict[str, GroupBox] = field(default_factory=dict)
    width: float = 0.0
    height: float = 0.0
    from_overrides: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "width": self.width,
            "height": self.height,
            "from_overrides": self.from_overrides,
            "nodes": [
                {
                    "id": node_id,
                    "x": x,
                    "y": y,
                    "width": self.sizes[node_id][0],
                    "height": self.sizes[node_id][1],
                }
                for node_id, (x, y) in self.positions.items()
            ],
            "groups": [group.to_dict() for group in self.groups.values()],
        }


class LayoutEngine:
    """Computes deterministic positions for a layout graph."""

    def __init__(self, options: LayoutOptions | None = None):
        """
        Initialize the engine.

        Raises:
            LayoutError: If the configured direction is unknown
        """
        self.options = options or LayoutOptions()
        self.layered = LayeredLayout(
            direction=self.options.direction,
            node_sep=self.options.node_sep,
            rank_sep=self.options.rank_sep,
        )

    def build_graph(
        self, model: SchemaModel, group_key: Callable[[Table | EnumType], str] = default_group_key
    ) -> LayoutGraph:
        return build_layout_graph(
            model,
            table_width=self.options.table_width,
            enum_width=self.options.enum_width,
            header_height=self.options.header_height,
            row_height=self.options.row_height,
            padding=self.options.node_padding,
            group_key=group_key,
        )

    def layout_model(
        self,
        model: SchemaModel,
        overrides: Mapping[str, Position] | None = None,
        group_key: Callable[[Table | EnumType], str] = default_group_key,
    ) -> LayoutResult:
        """Build the layout graph of a model and lay it out."""
        return self.layout(self.build_graph(model, group_key), overrides)

    def layout(self, graph: LayoutGraph, overrides: Mapping[str, Position] | None = None) -> LayoutResult:
        """
        Compute positions for every node of the graph.

        Args:
            graph: Nodes and edges to place
            overrides: Previously stored positions; used verbatim only when
                they cover every node of the graph

        Returns:
            LayoutResult keyed by node id

        Raises:
            LayoutError: If an edge names an unknown node
        """
        if not graph.nodes:
            return LayoutResult()

        sizes = {node.id: (node.width, node.height) for node in graph.nodes}
        for source, target in graph.edges:
            if source not in sizes or target not in sizes:
                raise LayoutError(f"Edge {source} -> {target} references an unknown node")

        if overrides and all(node.id in overrides for node in graph.nodes):
            logger.debug(f"Using {len(graph.nodes)} stored positions")
            return self._from_overrides(graph, sizes, overrides)
        if overrides:
            logger.debug("Stored positions do not cover every node, recomputing layout")

        if self.options.grouped:
            return self._layout_grouped(graph, sizes)

        drawing = self.layered.run(sizes, graph.edges)
        return LayoutResult(
            positions=self._offset(drawing.positions, self.options.margin_x, self.options.margin_y),
            sizes=sizes,
            width=drawing.width + 2 * self.options.margin_x,
            height=drawing.height + 2 * self.options.margin_y,
        )

    @staticmethod
    def _offset(positions: dict[str, Position], dx: float, dy: float) -> dict[str, Position]:
        return {node_id: (round(x + dx, 2), round(y + dy, 2)) for node_id, (x, y) in sorted(positions.items())}

    def _groups(self, graph: LayoutGraph) -> dict[str, list[LayoutNode]]:
        groups: dict[str, list[LayoutNode]] = {}
        for node in sorted(graph.nodes, key=lambda node: (node.group, node.id)):
            groups.setdefault(node.group, []).append(node)
        return groups

    def _layout_grouped(self, graph: LayoutGraph, sizes: dict[str, tuple[float, float]]) -> LayoutResult:
        options = self.options
        layered = self.layered
        groups = self._groups(graph)
        group_of = {node.id: node.group for node in graph.nodes}

        local: dict[str, Drawing] = {}
        box_sizes: dict[str, tuple[float, float]] = {}
        for key, members in groups.items():
            member_ids = {node.id for node in members}
            internal = [(source, target) for source, target in graph.edges if source in member_ids and target in member_ids]
            drawing = layered.run({node.id: sizes[node.id] for node in members}, internal)
            local[key] = drawing
            box_sizes[key] = (
                drawing.width + 2 * options.group_padding,
                drawing.height + options.group_header_height + 2 * options.group_padding,
            )

        super_edges = sorted(
            {
                (group_of[source], group_of[target])
                for source, target in graph.edges
                if group_of[source] != group_of[target]
            }
        )
        outer = layered.run(box_sizes, super_edges)
        logger.debug(f"Laid out {len(groups)} groups with {len(super_edges)} cross-group edges")

        positions: dict[str, Position] = {}
        boxes: dict[str, GroupBox] = {}
        for key, members in groups.items():
            box_x = outer.positions[key][0] + options.margin_x
            box_y = outer.positions[key][1] + options.margin_y
            boxes[key] = GroupBox(
                key=key,
                x=round(box_x, 2),
                y=round(box_y, 2),
                width=round(box_sizes[key][0], 2),
                height=round(box_sizes[key][1], 2),
                members=tuple(node.id for node in members),
            )
            inset_x = box_x + options.group_padding
            inset_y = box_y + options.group_header_height + options.group_padding
            for node_id, (x, y) in local[key].positions.items():
                positions[node_id] = (round(inset_x + x, 2), round(inset_y + y, 2))

        return LayoutResult(
            positions=dict(sorted(positions.items())),
            sizes=sizes,
            groups=boxes,
            width=outer.width + 2 * options.margin_x,
            height=outer.height + 2 * options.margin_y,
        )

    def _from_overrides(
        self,
        graph: LayoutGraph,
        sizes: dict[str, tuple[float, float]],
        overrides: Mapping[str, Position],
    ) -> LayoutResult:
        options = self.options
        positions = {node.id: (float(overrides[node.id][0]), float(overrides[node.id][1])) for node in graph.nodes}

        boxes: dict[str, GroupBox] = {}
        if options.grouped:
            for key, members in self._groups(graph).items():
                left = min(positions[node.id][0] for node in members) - options.group_padding
                top = min(positions[node.id][1] for node in members) - options.group_header_height - options.group_padding
                right = max(positions[node.id][0] + node.width for node in members) + options.group_padding
                bottom = max(positions[node.id][1] + node.height for node in members) + options.group_padding
                boxes[key] = GroupBox(
                    key=key,
                    x=left,
                    y=top,
                    width=right - left,
                    height=bottom - top,
                    members=tuple(node.id for node in members),
                )

        right = max(x + sizes[node_id][0] for node_id, (x, _) in positions.items())
        bottom = max(y + sizes[node_id][1] for node_id, (_, y) in positions.items())
        return LayoutResult(
            positions=dict(sorted(positions.items())),
            sizes=sizes,
            groups=boxes,
            width=right + options.margin_x,
            height=bottom + options.margin_y,
            from_overrides=True,
        )
