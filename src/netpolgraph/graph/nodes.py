"""Graph nodes and the build-scoped store that creates and updates them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from netpolgraph.graph.identity import NodeType, generate_node_id
from netpolgraph.policy.models import Direction, IPBlock, MatchExpression, Selector

logger = logging.getLogger(__name__)

_TRAILER_PREFIX = "Referenced by policies: "


@dataclass
class Node:
    """One endpoint of the graph."""

    id: str
    type: NodeType
    label: str
    details: dict
    detail_body: str = ""
    direction: Direction | None = None
    policies: list[str] = field(default_factory=list)

    def add_policy(self, policy_name: str) -> bool:
        """Record a referencing policy. Returns False if it was already known."""
        if policy_name in self.policies:
            return False
        self.policies.append(policy_name)
        return True

    @property
    def detail_text(self) -> str:
        """Description with a single trailer once several policies share the node."""
        if len(self.policies) < 2:
            return self.detail_body
        return f"{self.detail_body}\n\n{_TRAILER_PREFIX}{', '.join(self.policies)}"

    def to_dict(self) -> dict:
        data = {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
            "details": self.details,
            "detailText": self.detail_text,
            "policies": list(self.policies),
        }
        if self.direction is not None:
            data["direction"] = self.direction.value
        return data


# ---------------------------------------------------------------------------
# Label and description helpers
# ---------------------------------------------------------------------------


def _short_key(key: str) -> str:
    return key.split("/")[-1]


def _labels_text(labels: dict[str, str]) -> str:
    return ", ".join(f"{_short_key(k)}: {v}" for k, v in labels.items())


def _expression_text(expr: MatchExpression, short: bool) -> str:
    key = _short_key(expr.key) if short else expr.key
    return f"{key} {expr.operator} [{', '.join(expr.values)}]"


def _expressions_text(
    expressions: tuple[MatchExpression, ...], short: bool = True, sep: str = ", "
) -> str:
    return sep.join(_expression_text(e, short) for e in expressions)


def _full_labels(labels: dict[str, str]) -> str:
    return "\n".join(f"{k}: {v}" for k, v in labels.items())


def pod_label(namespace: str, selector: Selector | None) -> str:
    label = f"{namespace}:pod"
    if selector is not None and selector.match_labels:
        label += f"({_labels_text(selector.match_labels)})"
    return label


def namespace_label(selector: Selector | None) -> str:
    if selector is not None and selector.match_labels is not None:
        return f"ns:{_labels_text(selector.match_labels)}"
    if selector is not None and selector.match_expressions is not None:
        return f"ns:({_expressions_text(selector.match_expressions)})"
    return "ns:selector"


def combined_label(ns_selector: Selector | None, pod_selector: Selector | None) -> str:
    ns_text = "unknown"
    if ns_selector is not None and ns_selector.match_labels is not None:
        ns_text = _labels_text(ns_selector.match_labels)
    elif ns_selector is not None and ns_selector.match_expressions is not None:
        ns_text = _expressions_text(ns_selector.match_expressions)

    pod_text = "unknown"
    if pod_selector is not None and pod_selector.match_labels is not None:
        pod_text = _labels_text(pod_selector.match_labels)
    return f"ns:({ns_text})+pod({pod_text})"


def anywhere_label(direction: Direction) -> str:
    return "Any Source" if direction is Direction.INGRESS else "Any Destination"


def _pod_body(selector: Selector | None, policy_target: bool = False) -> str:
    if selector is not None and selector.match_labels:
        if policy_target:
            # A policy's own pods list their labels on one line
            return "Labels: " + ", ".join(
                f"{k}: {v}" for k, v in selector.match_labels.items()
            )
        return "Labels: " + _full_labels(selector.match_labels)
    return "No labels specified"


def _namespace_body(selector: Selector | None) -> str:
    if selector is not None and selector.match_labels is not None:
        return "Labels: " + _full_labels(selector.match_labels)
    if selector is not None and selector.match_expressions is not None:
        return "Expressions: " + _expressions_text(
            selector.match_expressions, short=False, sep="\n"
        )
    return ""


def _ip_block_body(ip_block: IPBlock | None) -> str:
    cidr = ip_block.cidr if ip_block is not None else None
    text = f"CIDR: {cidr or 'unknown'}"
    if ip_block is not None and ip_block.except_:
        text += f"\nExcept: {', '.join(ip_block.except_)}"
    return text


def _combined_body(ns_selector: Selector | None, pod_selector: Selector | None) -> str:
    lines = ["Combined selector"]
    if ns_selector is not None and ns_selector.match_labels is not None:
        lines.append("Namespace Labels: " + _full_labels(ns_selector.match_labels))
    if ns_selector is not None and ns_selector.match_expressions is not None:
        lines.append(
            "Namespace Expressions: "
            + _expressions_text(ns_selector.match_expressions, short=False, sep="\n")
        )
    if pod_selector is not None and pod_selector.match_labels is not None:
        lines.append("Pod Labels: " + _full_labels(pod_selector.match_labels))
    return "\n".join(lines)


def _selector_dict(selector: Selector | None) -> dict:
    return selector.to_dict() if selector is not None else {}


def describe(node_type: NodeType, namespace: str, details: dict) -> tuple[str, dict, str]:
    """Return ``(label, details payload, description)`` for a new node."""
    pod_selector = details.get("pod_selector")
    ns_selector = details.get("namespace_selector")

    if node_type is NodeType.POD:
        return (
            pod_label(namespace, pod_selector),
            {"namespace": namespace, "podSelector": _selector_dict(pod_selector)},
            _pod_body(pod_selector, details.get("policy_target", False)),
        )
    if node_type is NodeType.NAMESPACE:
        return (
            namespace_label(ns_selector),
            {"namespace": namespace, **_selector_dict(ns_selector)},
            _namespace_body(ns_selector),
        )
    if node_type is NodeType.IP_BLOCK:
        ip_block = details.get("ip_block")
        cidr = ip_block.cidr if ip_block is not None and ip_block.cidr else "unknown"
        return (
            f"CIDR:{cidr}",
            {"namespace": namespace, **(ip_block.to_dict() if ip_block else {})},
            _ip_block_body(ip_block),
        )
    if node_type is NodeType.COMBINED:
        return (
            combined_label(ns_selector, pod_selector),
            {
                "namespace": _selector_dict(ns_selector),
                "pod": _selector_dict(pod_selector),
            },
            _combined_body(ns_selector, pod_selector),
        )
    direction: Direction = details["direction"]
    return (
        anywhere_label(direction),
        {"namespace": namespace, "direction": direction.value},
        "",
    )


class NodeAccumulator:
    """Nodes of one build, keyed by identity.

    The first reference creates a node; every later reference only records
    the additional policy. Nodes are never replaced.
    """

    def __init__(self, deduplicate: bool = True) -> None:
        self.deduplicate = deduplicate
        self._nodes: dict[str, Node] = {}

    def __len__(self) -> int:
        return len(self._nodes)

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def get(self, node_id: str) -> Node | None:
        return self._nodes.get(node_id)

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    def ensure_node(
        self,
        node_type: NodeType,
        namespace: str,
        details: dict,
        policy_name: str,
        direction: Direction | None = None,
    ) -> str:
        """Create or update the node for ``details`` and return its id."""
        node_id = generate_node_id(
            node_type, namespace, details, policy_name, self.deduplicate
        )
        node = self._nodes.get(node_id)
        if node is None:
            label, payload, body = describe(node_type, namespace, details)
            self._nodes[node_id] = Node(
                id=node_id,
                type=node_type,
                label=label,
                details=payload,
                detail_body=body,
                direction=direction,
                policies=[policy_name],
            )
            logger.debug("Created %s node %s", node_type.value, label)
        elif node.add_policy(policy_name):
            logger.debug("Node %s now shared by %s", node.label, node.policies)
        return node_id
