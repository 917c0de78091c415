"""Policy data models — immutable dataclasses describing NetworkPolicy input."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field

# Stand-in for a rule that declares no ports at all.
ALL_PORTS = "all"


class Direction(enum.Enum):
    """Which way traffic flows relative to the selected pods."""

    INGRESS = "ingress"
    EGRESS = "egress"


class PolicyType(enum.Enum):
    """Values allowed in ``spec.policyTypes``."""

    INGRESS = "Ingress"
    EGRESS = "Egress"


@dataclass(frozen=True)
class MatchExpression:
    """One ``matchExpressions`` entry."""

    key: str
    operator: str
    values: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "operator": self.operator,
            "values": list(self.values),
        }


@dataclass(frozen=True)
class Selector:
    """A label selector.

    ``None`` means the field was absent from the document, which is not the
    same thing as an empty mapping.
    """

    match_labels: dict[str, str] | None = None
    match_expressions: tuple[MatchExpression, ...] | None = None

    def to_dict(self) -> dict:
        data: dict = {}
        if self.match_labels is not None:
            data["matchLabels"] = dict(self.match_labels)
        if self.match_expressions is not None:
            data["matchExpressions"] = [e.to_dict() for e in self.match_expressions]
        return data


@dataclass(frozen=True)
class PortSpec:
    """A single port entry of a rule."""

    port: int | str | None = None
    end_port: int | None = None
    protocol: str | None = None

    def to_dict(self) -> dict:
        data: dict = {}
        if self.port is not None:
            data["port"] = self.port
        if self.end_port is not None:
            data["endPort"] = self.end_port
        if self.protocol is not None:
            data["protocol"] = self.protocol
        return data


@dataclass(frozen=True)
class IPBlock:
    """A CIDR peer with optional exclusions."""

    cidr: str | None = None
    except_: tuple[str, ...] = ()

    def to_dict(self) -> dict:
        data: dict = {"cidr": self.cidr}
        if self.except_:
            data["except"] = list(self.except_)
        return data


@dataclass(frozen=True)
class Peer:
    """One ``from``/``to`` entry of a rule."""

    pod_selector: Selector | None = None
    namespace_selector: Selector | None = None
    ip_block: IPBlock | None = None

    @property
    def is_combined(self) -> bool:
        return self.pod_selector is not None and self.namespace_selector is not None

    def to_dict(self) -> dict:
        data: dict = {}
        if self.pod_selector is not None:
            data["podSelector"] = self.pod_selector.to_dict()
        if self.namespace_selector is not None:
            data["namespaceSelector"] = self.namespace_selector.to_dict()
        if self.ip_block is not None:
            data["ipBlock"] = self.ip_block.to_dict()
        return data


@dataclass(frozen=True)
class Rule:
    """An ingress or egress rule. No peers means any peer, no ports means all."""

    peers: tuple[Peer, ...] = ()
    ports: tuple[PortSpec, ...] | None = None

    def to_dict(self, direction: Direction) -> dict:
        data: dict = {
            "from" if direction is Direction.INGRESS else "to": [
                p.to_dict() for p in self.peers
            ],
        }
        if self.ports is not None:
            data["ports"] = [p.to_dict() for p in self.ports]
        return data


@dataclass(frozen=True)
class NetworkPolicy:
    """A complete, already-normalized NetworkPolicy record."""

    name: str
    namespace: str = "default"
    pod_selector: Selector = field(default_factory=Selector)
    ingress: tuple[Rule, ...] = ()
    egress: tuple[Rule, ...] = ()
    policy_types: tuple[PolicyType, ...] = ()

    def rules(self, direction: Direction) -> tuple[Rule, ...]:
        return self.ingress if direction is Direction.INGRESS else self.egress

    def to_dict(self) -> dict:
        return {
            "apiVersion": "networking.k8s.io/v1",
            "kind": "NetworkPolicy",
            "metadata": {"name": self.name, "namespace": self.namespace},
            "spec": {
                "podSelector": self.pod_selector.to_dict(),
                "policyTypes": [t.value for t in self.policy_types],
                "ingress": [r.to_dict(Direction.INGRESS) for r in self.ingress],
                "egress": [r.to_dict(Direction.EGRESS) for r in self.egress],
            },
        }
