"""Deterministic identifiers for graph nodes and links."""

from __future__ import annotations

import enum

from netpolgraph.graph.selectors import normalize_selector
from netpolgraph.policy.models import Direction

_UNKNOWN_CIDR = "unknown"


class NodeType(enum.Enum):
    """Kinds of endpoints that appear in the graph."""

    POD = "pod"
    NAMESPACE = "namespace"
    IP_BLOCK = "ipBlock"
    COMBINED = "combined"
    ANYWHERE = "anywhere"


def _policy_part(policy_name: str, deduplicate: bool) -> str:
    return "" if deduplicate else f":policy:{policy_name}"


def generate_node_id(
    node_type: NodeType,
    namespace: str,
    details: dict,
    policy_name: str,
    deduplicate: bool,
) -> str:
    """Compute the identity of a node.

    ``details`` carries the type-specific input: ``pod_selector`` for pods,
    ``namespace_selector`` for namespaces, both for combined peers,
    ``ip_block`` for CIDRs and ``direction`` for the anywhere endpoint.
    Outside deduplicate mode the owning policy is part of every identity.
    """
    if node_type is NodeType.POD:
        base = f"pod:{namespace}:{normalize_selector(details.get('pod_selector'))}"
    elif node_type is NodeType.NAMESPACE:
        base = f"namespace:{normalize_selector(details.get('namespace_selector'))}"
    elif node_type is NodeType.IP_BLOCK:
        ip_block = details.get("ip_block")
        cidr = ip_block.cidr if ip_block is not None and ip_block.cidr else _UNKNOWN_CIDR
        base = f"ipBlock:{cidr}"
    elif node_type is NodeType.COMBINED:
        base = (
            f"combined:{namespace}:"
            f"{normalize_selector(details.get('namespace_selector'))}:"
            f"{normalize_selector(details.get('pod_selector'))}"
        )
    else:
        direction: Direction = details["direction"]
        base = f"anywhere:{direction.value}"
    return base + _policy_part(policy_name, deduplicate)


def generate_link_id(
    source_id: str,
    target_id: str,
    direction: Direction,
    policy_name: str,
    deduplicate: bool,
) -> str:
    """Compute the identity of a link. Ports never take part."""
    return (
        f"link:{source_id}:{target_id}:{direction.value}"
        + _policy_part(policy_name, deduplicate)
    )
