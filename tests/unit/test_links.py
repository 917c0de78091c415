"""Tests for link deduplication and port merging."""

from netpolgraph.graph.links import Link, LinkRegistry
from netpolgraph.policy.models import ALL_PORTS, Direction, PortSpec

HTTP = (PortSpec(port=80, protocol="TCP"),)
HTTPS = (PortSpec(port=443, protocol="TCP"),)


def test_new_link():
    registry = LinkRegistry()
    link = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    assert len(registry) == 1
    assert link.policy == "p1"
    assert link.ports == HTTP
    assert link.rule_index == 0
    assert not link.detailed_ports
    assert not link.cross_policy


def test_same_ports_merge_policies():
    registry = LinkRegistry()
    first = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    second = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p2", 0)
    assert first is second
    assert len(registry) == 1
    assert first.policy == "p1, p2"
    assert first.ports_map is None
    assert not first.detailed_ports


def test_different_ports_switch_to_detailed_mode():
    registry = LinkRegistry()
    link = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    registry.add_link("a", "b", HTTPS, Direction.INGRESS, "p2", 3)
    assert link.detailed_ports
    assert link.ports == HTTP
    assert link.ports_map == {"p1": [HTTP], "p2": [HTTPS]}
    assert link.port_details == "p1: 80/TCP\np2: 443/TCP"


def test_same_policy_different_ports_keeps_both():
    registry = LinkRegistry()
    link = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    registry.add_link("a", "b", HTTPS, Direction.INGRESS, "p1", 1)
    assert link.policy == "p1"
    assert link.ports_map == {"p1": [HTTP, HTTPS]}
    assert link.port_details == "p1: 80/TCP; 443/TCP"


def test_all_ports_compared_structurally():
    registry = LinkRegistry()
    link = registry.add_link("a", "b", ALL_PORTS, Direction.EGRESS, "p1", 0)
    registry.add_link("a", "b", ALL_PORTS, Direction.EGRESS, "p2", 0)
    assert not link.detailed_ports
    registry.add_link("a", "b", (PortSpec(port=80, protocol="TCP"),), Direction.EGRESS, "p3", 0)
    assert link.detailed_ports
    assert link.ports_map["p1"] == [ALL_PORTS]


def test_ports_equal_to_first_seen_are_not_recorded():
    registry = LinkRegistry()
    link = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    registry.add_link("a", "b", HTTPS, Direction.INGRESS, "p2", 0)
    registry.add_link("a", "b", HTTP, Direction.INGRESS, "p3", 0)
    assert link.ports_map == {"p1": [HTTP], "p2": [HTTPS]}
    assert link.policy == "p1, p2, p3"
    assert link.port_details == "p1: 80/TCP\np2: 443/TCP"


def test_direction_is_part_of_identity():
    registry = LinkRegistry()
    registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    registry.add_link("a", "b", HTTP, Direction.EGRESS, "p1", 0)
    assert len(registry) == 2


def test_no_deduplication_never_merges():
    registry = LinkRegistry(deduplicate=False)
    registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    registry.add_link("a", "b", HTTPS, Direction.INGRESS, "p1", 1)
    registry.add_link("a", "b", HTTP, Direction.INGRESS, "p2", 0)
    assert len(registry) == 3
    assert not any(link.detailed_ports for link in registry.links)


def test_register_refuses_taken_id():
    registry = LinkRegistry()
    link = Link(source="a", target="b", direction=Direction.INGRESS)
    assert registry.register("x", link)
    assert not registry.register("x", Link(source="c", target="d", direction=Direction.INGRESS))
    assert registry.links == [link]


def test_copy_is_independent():
    registry = LinkRegistry()
    registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    other = registry.copy()
    other.register("extra", Link(source="c", target="d", direction=Direction.EGRESS))
    assert len(registry) == 1
    assert len(other) == 2


def test_to_dict_detailed():
    registry = LinkRegistry()
    link = registry.add_link("a", "b", HTTP, Direction.INGRESS, "p1", 0)
    registry.add_link("a", "b", ALL_PORTS, Direction.INGRESS, "p2", 0)
    data = link.to_dict()
    assert data["ports"] == [{"port": 80, "protocol": "TCP"}]
    assert data["policy"] == "p1, p2"
    assert data["detailedPorts"] is True
    assert data["portsMap"] == {"p1": [[{"port": 80, "protocol": "TCP"}]], "p2": ["all"]}
    assert data["portDetails"] == "p1: 80/TCP\np2: All ports"
    assert data["crossPolicy"] is False
