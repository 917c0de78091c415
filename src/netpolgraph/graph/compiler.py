"""Compile NetworkPolicy records into a graph of endpoints and allowed traffic.

The build runs in two passes. ``build_base_graph`` turns every policy into
nodes and links on its own. ``link_across_policies`` then consumes that
result and adds edges inferred between policies. ``compile_graph`` composes
both. Nothing is shared between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from netpolgraph.graph.cross_policy import infer_cross_policy_links
from netpolgraph.graph.identity import NodeType
from netpolgraph.graph.links import Link, LinkRegistry
from netpolgraph.graph.nodes import Node, NodeAccumulator
from netpolgraph.policy.models import ALL_PORTS, Direction, NetworkPolicy, Peer

logger = logging.getLogger(__name__)


@dataclass
class Graph:
    """The compiled graph handed to renderers, filters and tooltips."""

    nodes: list[Node] = field(default_factory=list)
    links: list[Link] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "nodes": [n.to_dict() for n in self.nodes],
            "links": [link.to_dict() for link in self.links],
        }


@dataclass
class BaseGraph:
    """Output of the first pass, before any cross-policy inference."""

    nodes: NodeAccumulator
    links: LinkRegistry
    deduplicate: bool = True

    def to_graph(self) -> Graph:
        return Graph(nodes=self.nodes.nodes, links=self.links.links)


def _peer_node(
    nodes: NodeAccumulator,
    policy: NetworkPolicy,
    peer: Peer,
    direction: Direction,
) -> str | None:
    if peer.is_combined:
        node_type = NodeType.COMBINED
    elif peer.namespace_selector is not None:
        node_type = NodeType.NAMESPACE
    elif peer.pod_selector is not None:
        node_type = NodeType.POD
    elif peer.ip_block is not None:
        node_type = NodeType.IP_BLOCK
    else:
        logger.debug("Policy %s has a peer with no selector, skipping", policy.name)
        return None

    details = {
        "pod_selector": peer.pod_selector,
        "namespace_selector": peer.namespace_selector,
        "ip_block": peer.ip_block,
    }
    return nodes.ensure_node(node_type, policy.namespace, details, policy.name, direction)


def _add_policy(
    policy: NetworkPolicy,
    nodes: NodeAccumulator,
    links: LinkRegistry,
) -> None:
    target_id = nodes.ensure_node(
        NodeType.POD,
        policy.namespace,
        {"pod_selector": policy.pod_selector, "policy_target": True},
        policy.name,
    )

    for direction in Direction:
        for rule_index, rule in enumerate(policy.rules(direction) or ()):
            if rule is None:
                continue
            ports = rule.ports if rule.ports is not None else ALL_PORTS

            if not rule.peers:
                peer_ids = [
                    nodes.ensure_node(
                        NodeType.ANYWHERE,
                        policy.namespace,
                        {"direction": direction},
                        policy.name,
                        direction,
                    )
                ]
            else:
                peer_ids = [
                    _peer_node(nodes, policy, peer, direction) for peer in rule.peers
                ]

            for peer_id in peer_ids:
                if peer_id is None:
                    continue
                if direction is Direction.INGRESS:
                    source_id, dest_id = peer_id, target_id
                else:
                    source_id, dest_id = target_id, peer_id
                links.add_link(
                    source_id, dest_id, ports, direction, policy.name, rule_index
                )


def build_base_graph(
    policies: Sequence[NetworkPolicy],
    deduplicate: bool = True,
) -> BaseGraph:
    """First pass: nodes and links contributed by each policy on its own.

    A policy that fails to build is logged and skipped; the others still
    contribute.
    """
    nodes = NodeAccumulator(deduplicate)
    links = LinkRegistry(deduplicate)
    for policy in policies:
        try:
            _add_policy(policy, nodes, links)
        except Exception:
            logger.warning(
                "Skipping policy %s after a build error",
                getattr(policy, "name", "<unnamed>"),
                exc_info=True,
            )
    return BaseGraph(nodes=nodes, links=links, deduplicate=deduplicate)


def link_across_policies(
    base: BaseGraph,
    policies: Sequence[NetworkPolicy],
) -> Graph:
    """Second pass: add inferred cross-policy links to a first-pass result.

    ``base`` is left untouched. Outside deduplicate mode every node belongs
    to a single policy, so nothing is inferred.
    """
    if not base.deduplicate:
        return base.to_graph()

    registry = base.links.copy()
    created = infer_cross_policy_links(policies, base.nodes, registry)
    logger.debug("Inferred %d cross-policy links", len(created))
    return Graph(nodes=base.nodes.nodes, links=registry.links)


def compile_graph(
    policies: Sequence[NetworkPolicy],
    deduplicate: bool = True,
) -> Graph:
    """Compile policies into ``Graph(nodes, links)``."""
    base = build_base_graph(policies, deduplicate)
    graph = link_across_policies(base, policies)
    logger.info(
        "Compiled %d policies into %d nodes and %d links",
        len(policies),
        len(graph.nodes),
        len(graph.links),
    )
    return graph
