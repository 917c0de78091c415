"""Direction filter applied to a compiled graph."""

from __future__ import annotations

from netpolgraph.graph.compiler import Graph
from netpolgraph.policy.models import Direction

ALL_DIRECTIONS = "all"


def filter_by_direction(graph: Graph, direction: Direction | str) -> Graph:
    """Keep only links flowing in ``direction`` and the nodes they still touch.

    ``"all"`` returns the graph as is.
    """
    if direction == ALL_DIRECTIONS:
        return graph
    direction = Direction(direction)

    links = [link for link in graph.links if link.direction is direction]
    used: set[str] = set()
    for link in links:
        used.add(link.source)
        used.add(link.target)
    nodes = [n for n in graph.nodes if n.id in used]
    return Graph(nodes=nodes, links=links)
