"""Graph links and the registry that deduplicates and merges them."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from netpolgraph.graph.formatters import ports_text
from netpolgraph.graph.identity import generate_link_id
from netpolgraph.policy.models import ALL_PORTS, Direction, PortSpec

logger = logging.getLogger(__name__)


def _ports_to_json(ports):
    if ports == ALL_PORTS:
        return ALL_PORTS
    return [p.to_dict() for p in ports]


@dataclass
class Link:
    """A directed allowed-traffic edge between two nodes."""

    source: str
    target: str
    direction: Direction
    ports: tuple[PortSpec, ...] | str = ALL_PORTS
    policies: list[str] = field(default_factory=list)
    rule_index: int | None = None
    cross_policy: bool = False
    combined_selector: bool = False
    # policy name -> port sets differing from the first-seen ports (plus the first)
    ports_map: dict[str, list] | None = None
    detailed_ports: bool = False
    label: str | None = None

    @property
    def policy(self) -> str:
        if self.label is not None:
            return self.label
        return ", ".join(self.policies)

    @property
    def port_details(self) -> str | None:
        if not self.detailed_ports or not self.ports_map:
            return None
        return "\n".join(
            f"{name}: {'; '.join(ports_text(p) for p in contributions)}"
            for name, contributions in self.ports_map.items()
        )

    def to_dict(self) -> dict:
        data = {
            "source": self.source,
            "target": self.target,
            "direction": self.direction.value,
            "ports": _ports_to_json(self.ports),
            "policy": self.policy,
            "policies": list(self.policies),
            "crossPolicy": self.cross_policy,
            "combinedSelector": self.combined_selector,
        }
        if self.rule_index is not None:
            data["ruleIndex"] = self.rule_index
        if self.detailed_ports and self.ports_map:
            data["detailedPorts"] = True
            data["portsMap"] = {
                name: [_ports_to_json(p) for p in contributions]
                for name, contributions in self.ports_map.items()
            }
            data["portDetails"] = self.port_details
        return data


class LinkRegistry:
    """Links of one build, keyed by identity (ports excluded)."""

    def __init__(self, deduplicate: bool = True) -> None:
        self.deduplicate = deduplicate
        self._by_id: dict[str, Link] = {}
        self._links: list[Link] = []

    def __len__(self) -> int:
        return len(self._links)

    def __contains__(self, link_id: object) -> bool:
        return link_id in self._by_id

    @property
    def links(self) -> list[Link]:
        return list(self._links)

    def copy(self) -> LinkRegistry:
        """Shallow copy; links are shared, the index and order are not."""
        other = LinkRegistry(self.deduplicate)
        other._by_id = dict(self._by_id)
        other._links = list(self._links)
        return other

    def register(self, link_id: str, link: Link) -> bool:
        """Store ``link`` under ``link_id`` unless the id is taken."""
        if link_id in self._by_id:
            return False
        self._by_id[link_id] = link
        self._links.append(link)
        return True

    def add_link(
        self,
        source_id: str,
        target_id: str,
        ports,
        direction: Direction,
        policy_name: str,
        rule_index: int | None = None,
    ) -> Link:
        """Add a first-pass link, merging into an existing one when deduplicating."""
        link_id = generate_link_id(
            source_id, target_id, direction, policy_name, self.deduplicate
        )
        existing = self._by_id.get(link_id)

        if existing is None or not self.deduplicate:
            link = Link(
                source=source_id,
                target=target_id,
                direction=direction,
                ports=ports,
                policies=[policy_name],
                rule_index=rule_index,
            )
            # Outside deduplicate mode the same id may legitimately repeat
            # (one policy, two rules, same peer); keep every link.
            self._by_id[link_id] = link
            self._links.append(link)
            return link

        if policy_name not in existing.policies:
            existing.policies.append(policy_name)

        # All-or-nothing comparison against the first-seen ports
        if existing.ports != ports:
            if existing.ports_map is None:
                existing.ports_map = {existing.policies[0]: [existing.ports]}
                logger.debug(
                    "Link %s -> %s has differing ports across %s",
                    source_id,
                    target_id,
                    existing.policies,
                )
            contributions = existing.ports_map.setdefault(policy_name, [])
            if ports not in contributions:
                contributions.append(ports)
            existing.detailed_ports = True
        return existing
