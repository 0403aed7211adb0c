"""
Layout graph construction from a resolved schema model.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Literal

from runway.typing import EnumType, SchemaModel, Table

logger = logging.getLogger(__name__)

NodeKind = Literal["table", "enum"]

DEFAULT_TABLE_WIDTH = 220
DEFAULT_ENUM_WIDTH = 180
DEFAULT_HEADER_HEIGHT = 32
DEFAULT_ROW_HEIGHT = 24
DEFAULT_NODE_PADDING = 12


@dataclass(frozen=True)
class LayoutNode:
    """A box to be placed: one per table and one per enum type."""

    id: str
    kind: NodeKind
    width: float
    height: float
    group: str = "."

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "kind": self.kind, "width": self.width, "height": self.height, "group": self.group}


@dataclass(frozen=True)
class LayoutGraph:
    nodes: tuple[LayoutNode, ...] = ()
    edges: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def node_ids(self) -> set[str]:
        return {node.id for node in self.nodes}

    def get_node(self, node_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def node_height(
    row_count: int,
    header_height: float = DEFAULT_HEADER_HEIGHT,
    row_height: float = DEFAULT_ROW_HEIGHT,
    padding: float = DEFAULT_NODE_PADDING,
) -> float:
    """
    Height of a node box.

    >>> node_height(5)
    164
    """
    return header_height + row_count * row_height + padding


def default_group_key(entity: Table | EnumType) -> str:
    """Group by the folder of the entity's source file; ``"."`` at the root."""
    source_file = (entity.source_file or "").replace("\\", "/")
    if not source_file:
        return "."
    return str(PurePosixPath(source_file).parent)


def build_layout_graph(
    model: SchemaModel,
    table_width: float = DEFAULT_TABLE_WIDTH,
    enum_width: float = DEFAULT_ENUM_WIDTH,
    header_height: float = DEFAULT_HEADER_HEIGHT,
    row_height: float = DEFAULT_ROW_HEIGHT,
    padding: float = DEFAULT_NODE_PADDING,
    group_key: Callable[[Table | EnumType], str] = default_group_key,
) -> LayoutGraph:
    """
    Build the node and edge sets for a resolved model.

    Tables come first, then enum types. When an id is declared more than
    once (duplicate tables, or an enum sharing a table's name) the first
    occurrence wins. Each foreign key contributes one edge from its table to
    the referenced table.
    """
    nodes: list[LayoutNode] = []
    seen: set[str] = set()

    for table in model.tables:
        if table.name in seen:
            logger.debug(f"Skipping duplicate layout node '{table.name}' from {table.source_file}")
            continue
        seen.add(table.name)
        nodes.append(
            LayoutNode(
                id=table.name,
                kind="table",
                width=table_width,
                height=node_height(len(table.columns), header_height, row_height, padding),
                group=group_key(table),
            )
        )

    for enum_type in model.types:
        if enum_type.name in seen:
            logger.debug(f"Skipping duplicate layout node '{enum_type.name}' from {enum_type.source_file}")
            continue
        seen.add(enum_type.name)
        nodes.append(
            LayoutNode(
                id=enum_type.name,
                kind="enum",
                width=enum_width,
                height=node_height(len(enum_type.values), header_height, row_height, padding),
                group=group_key(enum_type),
            )
        )

    edges = [
        (table.name, foreign_key.referenced_table)
        for table in model.tables
        for foreign_key in table.foreign_keys
        if foreign_key.referenced_table in seen
    ]
    return LayoutGraph(nodes=tuple(nodes), edges=tuple(edges))
