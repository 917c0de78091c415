"""Infer links between policies whose selectors refer to each other.

When a rule peer of policy A selects pods that policy B governs, the pods of
B may talk to the pods of A (ingress) or A may talk to B (egress). Matching
is a heuristic: ``matchLabels`` of the peer must be a subset of B's
``podSelector.matchLabels``. Namespace labels are not resolved, so a peer in
another namespace only counts when it carries a namespace selector at all.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from netpolgraph.graph.identity import NodeType, generate_link_id, generate_node_id
from netpolgraph.graph.links import Link, LinkRegistry
from netpolgraph.graph.nodes import NodeAccumulator
from netpolgraph.graph.selectors import selector_matches
from netpolgraph.policy.models import ALL_PORTS, Direction, NetworkPolicy, Peer

logger = logging.getLogger(__name__)


def _pod_node_id(policy: NetworkPolicy) -> str:
    return generate_node_id(
        NodeType.POD,
        policy.namespace,
        {"pod_selector": policy.pod_selector},
        policy.name,
        deduplicate=True,
    )


def _same_policy(a: NetworkPolicy, b: NetworkPolicy) -> bool:
    return a.name == b.name and a.namespace == b.namespace


def peer_selects(peer: Peer, owner: NetworkPolicy, target: NetworkPolicy) -> bool:
    """Whether a rule peer of ``owner`` selects the pods governed by ``target``."""
    if peer.pod_selector is None:
        return False
    if owner.namespace != target.namespace and peer.namespace_selector is None:
        return False
    return selector_matches(peer.pod_selector, target.pod_selector)


def _pair_link(
    owner: NetworkPolicy,
    target: NetworkPolicy,
    peer: Peer,
    direction: Direction,
    ports,
) -> tuple[str, Link]:
    owner_id = _pod_node_id(owner)
    target_id = _pod_node_id(target)
    if direction is Direction.INGRESS:
        first, second = target, owner
        source_id, dest_id = target_id, owner_id
    else:
        first, second = owner, target
        source_id, dest_id = owner_id, target_id

    link_id = generate_link_id(
        source_id,
        dest_id,
        direction,
        f"{first.name}->{second.name}",
        deduplicate=False,
    )
    link = Link(
        source=source_id,
        target=dest_id,
        direction=direction,
        ports=ports,
        policies=[first.name, second.name],
        cross_policy=True,
        combined_selector=peer.is_combined,
        label=f"{first.name} → {second.name}",
    )
    return link_id, link


def _links_for_owner(
    owner: NetworkPolicy,
    policies: Sequence[NetworkPolicy],
    nodes: NodeAccumulator,
    registry: LinkRegistry,
) -> list[Link]:
    created: list[Link] = []
    for direction in Direction:
        for rule in owner.rules(direction) or ():
            ports = rule.ports if rule.ports is not None else ALL_PORTS
            for peer in rule.peers or ():
                for target in policies:
                    if _same_policy(owner, target):
                        continue
                    if not peer_selects(peer, owner, target):
                        continue
                    if _pod_node_id(target) not in nodes:
                        continue
                    link_id, link = _pair_link(owner, target, peer, direction, ports)
                    if registry.register(link_id, link):
                        created.append(link)
                        logger.debug("Inferred %s link %s", direction.value, link.policy)
    return created


def infer_cross_policy_links(
    policies: Sequence[NetworkPolicy],
    nodes: NodeAccumulator,
    registry: LinkRegistry,
) -> list[Link]:
    """Register inferred links in ``registry`` and return the new ones.

    Links are scoped by the ordered pair of policies, so repeated peers in
    one policy never produce the same inferred edge twice. Policies whose
    pod node was not built in the first pass take no part.
    """
    created: list[Link] = []
    for owner in policies:
        try:
            if not owner.ingress and not owner.egress:
                continue
            if _pod_node_id(owner) not in nodes:
                continue
            created.extend(_links_for_owner(owner, policies, nodes, registry))
        except Exception:
            logger.warning(
                "Skipping cross-policy links of %s",
                getattr(owner, "name", "<unnamed>"),
                exc_info=True,
            )
    return created
