"""
Layered (Sugiyama-style) graph drawing.

The algorithm runs in five phases:

1. Cycle removal with the greedy heuristic of Eades, Lin and Smyth; edges
   pointing backwards in the resulting vertex sequence are reversed.
2. Rank assignment by longest path, followed by pulling every source node
   down to just before its nearest successor.
3. Normalization: edges spanning several ranks are split by dummy nodes.
4. Crossing reduction with alternating barycenter sweeps, keeping the best
   ordering seen.
5. Coordinate assignment: nodes are packed per rank and then repeatedly
   pulled toward the barycenter of their neighbors without breaking the
   minimum separation.

Every phase iterates in sorted node and edge order, so the output depends
only on the node sizes, the edge set and the parameters.
"""

import logging
from bisect import bisect_right, insort
from collections.abc import Iterable
from dataclasses import dataclass, field
from graphlib import TopologicalSorter

from runway.parser.shared.exceptions import LayoutError

logger = logging.getLogger(__name__)

DIRECTIONS = ("LR", "TB", "RL", "BT")

# Dummy node ids cannot collide with identifiers read from DDL
_DUMMY_PREFIX = "\0"


@dataclass
class Drawing:
    """Top-left positions of the real nodes and the bounding size of the drawing."""

    positions: dict[str, tuple[float, float]] = field(default_factory=dict)
    width: float = 0.0
    height: float = 0.0


def break_cycles(node_ids: list[str], edges: list[tuple[str, str]]) -> list[tuple[str, str]]:
    """
    Return an acyclic edge list by reversing feedback edges.

    Sinks are peeled to the end of the vertex sequence and sources to the
    front; when neither exists, the node with the largest out-degree minus
    in-degree is moved to the front. Ties go to the smallest id.
    """
    outgoing: dict[str, set[str]] = {node: set() for node in node_ids}
    incoming: dict[str, set[str]] = {node: set() for node in node_ids}
    for source, target in edges:
        outgoing[source].add(target)
        incoming[target].add(source)

    remaining = set(node_ids)
    head: list[str] = []
    tail: list[str] = []
    while remaining:
        sinks = sorted(node for node in remaining if not outgoing[node] & remaining)
        if sinks:
            tail.extend(sinks)
            remaining.difference_update(sinks)
            continue
        sources = sorted(node for node in remaining if not incoming[node] & remaining)
        if sources:
            head.extend(sources)
            remaining.difference_update(sources)
            continue
        chosen = max(
            sorted(remaining),
            key=lambda node: len(outgoing[node] & remaining) - len(incoming[node] & remaining),
        )
        head.append(chosen)
        remaining.remove(chosen)

    sequence = {node: position for position, node in enumerate(head + tail[::-1])}
    acyclic = {
        (source, target) if sequence[source] < sequence[target] else (target, source)
        for source, target in edges
    }
    reversed_count = sum(1 for source, target in edges if sequence[source] > sequence[target])
    if reversed_count:
        logger.debug(f"Reversed {reversed_count} edges to break cycles")
    return sorted(acyclic)


def assign_ranks(node_ids: list[str], edges: list[tuple[str, str]]) -> dict[str, int]:
    """Longest-path ranking of an acyclic graph, with sources pulled toward their successors."""
    predecessors: dict[str, list[str]] = {node: [] for node in node_ids}
    successors: dict[str, list[str]] = {node: [] for node in node_ids}
    sorter: TopologicalSorter = TopologicalSorter()
    for node in node_ids:
        sorter.add(node)
    for source, target in edges:
        predecessors[target].append(source)
        successors[source].append(target)
        sorter.add(target, source)

    ranks: dict[str, int] = {}
    for node in sorter.static_order():
        ranks[node] = max((ranks[predecessor] + 1 for predecessor in predecessors[node]), default=0)

    for node in node_ids:
        if not predecessors[node] and successors[node]:
            ranks[node] = min(ranks[successor] for successor in successors[node]) - 1

    lowest = min(ranks.values(), default=0)
    return {node: rank - lowest for node, rank in ranks.items()}


def count_crossings(upper: list[str], lower: list[str], successors: dict[str, list[str]]) -> int:
    """Count edge crossings between two adjacent layers."""
    lower_position = {node: position for position, node in enumerate(lower)}
    pairs = sorted(
        (upper_position, lower_position[successor])
        for upper_position, node in enumerate(upper)
        for successor in successors[node]
    )
    crossings = 0
    seen: list[int] = []
    for _, position in pairs:
        crossings += len(seen) - bisect_right(seen, position)
        insort(seen, position)
    return crossings


class LayeredLayout:
    """Computes a layered drawing for nodes of known size."""

    def __init__(
        self,
        direction: str = "LR",
        node_sep: float = 60,
        rank_sep: float = 120,
        edge_sep: float = 10,
        ordering_passes: int = 24,
        coordinate_passes: int = 8,
    ):
        """
        Initialize the layout.

        Args:
            direction: Rank direction, one of LR, TB, RL or BT
            node_sep: Separation between adjacent nodes of the same rank
            rank_sep: Separation between adjacent ranks
            edge_sep: Separation next to dummy nodes of long edges
            ordering_passes: Number of barycenter sweeps
            coordinate_passes: Number of coordinate relaxation sweeps
        """
        direction = direction.upper()
        if direction not in DIRECTIONS:
            raise LayoutError(f"Unknown layout direction: {direction}. Expected one of: {', '.join(DIRECTIONS)}")
        self.direction = direction
        self.node_sep = node_sep
        self.rank_sep = rank_sep
        self.edge_sep = edge_sep
        self.ordering_passes = ordering_passes
        self.coordinate_passes = coordinate_passes

    @property
    def horizontal(self) -> bool:
        return self.direction in ("LR", "RL")

    def run(self, sizes: dict[str, tuple[float, float]], edges: Iterable[tuple[str, str]]) -> Drawing:
        """
        Lay out nodes given as ``id -> (width, height)``.

        Self loops and duplicate edges are ignored. The drawing starts at (0, 0).

        Raises:
            LayoutError: If an edge names an unknown node
        """
        if not sizes:
            return Drawing()

        node_ids = sorted(sizes)
        edge_set = set()
        for source, target in edges:
            if source not in sizes or target not in sizes:
                raise LayoutError(f"Edge {source} -> {target} references an unknown node")
            if source != target:
                edge_set.add((source, target))

        acyclic = break_cycles(node_ids, sorted(edge_set))
        ranks = assign_ranks(node_ids, acyclic)
        layers, predecessors, successors = self._normalize(node_ids, acyclic, ranks)
        layers = self._order(layers, predecessors, successors)
        return self._place(layers, predecessors, successors, sizes)

    def _normalize(
        self, node_ids: list[str], edges: list[tuple[str, str]], ranks: dict[str, int]
    ) -> tuple[list[list[str]], dict[str, list[str]], dict[str, list[str]]]:
        """Split long edges with dummy nodes and group nodes into layers."""
        predecessors: dict[str, list[str]] = {node: [] for node in node_ids}
        successors: dict[str, list[str]] = {node: [] for node in node_ids}
        ranks = dict(ranks)
        dummy_count = 0

        for source, target in edges:
            previous = source
            for rank in range(ranks[source] + 1, ranks[target]):
                dummy = f"{_DUMMY_PREFIX}{dummy_count}"
                dummy_count += 1
                ranks[dummy] = rank
                predecessors[dummy] = []
                successors[dummy] = []
                successors[previous].append(dummy)
                predecessors[dummy].append(previous)
                previous = dummy
            successors[previous].append(target)
            predecessors[target].append(previous)

        layers: list[list[str]] = [[] for _ in range(max(ranks.values()) + 1)]
        for node in ranks:
            layers[ranks[node]].append(node)

        # Initial order: first layer by id, later layers by predecessor barycenter
        layers[0].sort()
        for index in range(1, len(layers)):
            position = {node: offset for offset, node in enumerate(layers[index - 1])}
            layers[index].sort(
                key=lambda node: (_barycenter(predecessors[node], position, float("inf")), node)
            )
        return layers, predecessors, successors

    def _order(
        self,
        layers: list[list[str]],
        predecessors: dict[str, list[str]],
        successors: dict[str, list[str]],
    ) -> list[list[str]]:
        best = [list(layer) for layer in layers]
        best_crossings = self._total_crossings(best, successors)
        current = [list(layer) for layer in layers]

        for sweep in range(self.ordering_passes):
            if best_crossings == 0:
                break
            if sweep % 2 == 0:
                for index in range(1, len(current)):
                    current[index] = _reorder(current[index], current[index - 1], predecessors)
            else:
                for index in range(len(current) - 2, -1, -1):
                    current[index] = _reorder(current[index], current[index + 1], successors)

            crossings = self._total_crossings(current, successors)
            if crossings < best_crossings:
                best = [list(layer) for layer in current]
                best_crossings = crossings

        logger.debug(f"Layer ordering finished with {best_crossings} crossings")
        return best

    @staticmethod
    def _total_crossings(layers: list[list[str]], successors: dict[str, list[str]]) -> int:
        return sum(count_crossings(layers[index], layers[index + 1], successors) for index in range(len(layers) - 1))

    def _place(
        self,
        layers: list[list[str]],
        predecessors: dict[str, list[str]],
        successors: dict[str, list[str]],
        sizes: dict[str, tuple[float, float]],
    ) -> Drawing:
        def extents(node: str) -> tuple[float, float]:
            """Return (extent along the rank axis, extent along the order axis)."""
            width, height = sizes.get(node, (0.0, 0.0))
            return (width, height) if self.horizontal else (height, width)

        def gap(left: str, right: str) -> float:
            separation = self.edge_sep if _is_dummy(left) or _is_dummy(right) else self.node_sep
            return (extents(left)[1] + extents(right)[1]) / 2 + separation

        # Pack each layer from zero
        center: dict[str, float] = {}
        for layer in layers:
            for offset, node in enumerate(layer):
                center[node] = extents(node)[1] / 2 if offset == 0 else center[layer[offset - 1]] + gap(layer[offset - 1], node)

        for sweep in range(self.coordinate_passes):
            if sweep % 2 == 0:
                order, neighbors = range(1, len(layers)), predecessors
            else:
                order, neighbors = range(len(layers) - 2, -1, -1), successors
            for index in order:
                layer = layers[index]
                desired = [_mean([center[other] for other in neighbors[node]], center[node]) for node in layer]
                for node, value in zip(layer, _separate(layer, desired, gap)):
                    center[node] = value

        order_start = min(center[node] - extents(node)[1] / 2 for node in center)
        order_total = max(center[node] + extents(node)[1] / 2 for node in center) - order_start

        thickness = [max((extents(node)[0] for node in layer), default=0.0) for layer in layers]
        rank_start = []
        cursor = 0.0
        for value in thickness:
            rank_start.append(cursor)
            cursor += value + self.rank_sep
        rank_total = cursor - self.rank_sep

        positions: dict[str, tuple[float, float]] = {}
        for index, layer in enumerate(layers):
            for node in layer:
                if _is_dummy(node):
                    continue
                rank_extent, order_extent = extents(node)
                along_rank = rank_start[index] + (thickness[index] - rank_extent) / 2
                if self.direction in ("RL", "BT"):
                    along_rank = rank_total - along_rank - rank_extent
                along_order = center[node] - order_extent / 2 - order_start
                x, y = (along_rank, along_order) if self.horizontal else (along_order, along_rank)
                positions[node] = (round(x, 2), round(y, 2))

        width, height = (rank_total, order_total) if self.horizontal else (order_total, rank_total)
        return Drawing(positions=positions, width=round(width, 2), height=round(height, 2))


def _is_dummy(node: str) -> bool:
    return node.startswith(_DUMMY_PREFIX)


def _mean(values: list[float], default: float) -> float:
    return sum(values) / len(values) if values else default


def _barycenter(neighbors: list[str], position: dict[str, int], default: float) -> float:
    return _mean([position[neighbor] for neighbor in neighbors], default)


def _reorder(layer: list[str], fixed: list[str], neighbors: dict[str, list[str]]) -> list[str]:
    """Sort a layer by the barycenter of its neighbors in the fixed layer."""
    position = {node: offset for offset, node in enumerate(fixed)}
    keyed = [
        (_barycenter(neighbors[node], position, float(offset)), offset, node) for offset, node in enumerate(layer)
    ]
    return [node for _, _, node in sorted(keyed)]


def _separate(layer: list[str], desired: list[float], gap) -> list[float]:
    """
    Move desired centers apart until every adjacent pair is separated.

    The result averages a left-to-right push and a right-to-left push of the
    desired positions; both satisfy the separation constraints, so their
    average does too.
    """
    forward = list(desired)
    for index in range(1, len(layer)):
        forward[index] = max(forward[index], forward[index - 1] + gap(layer[index - 1], layer[index]))
    backward = list(desired)
    for index in range(len(layer) - 2, -1, -1):
        backward[index] = min(backward[index], backward[index + 1] - gap(layer[index], layer[index + 1]))
    return [(left + right) / 2 for left, right in zip(forward, backward)]
