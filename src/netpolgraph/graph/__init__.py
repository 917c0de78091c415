"""Policy-to-graph compiler."""

from netpolgraph.graph.compiler import (
    BaseGraph,
    Graph,
    build_base_graph,
    compile_graph,
    link_across_policies,
)

__all__ = [
    "BaseGraph",
    "Graph",
    "build_base_graph",
    "compile_graph",
    "link_across_policies",
]
