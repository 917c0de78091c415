"""Tests for node and link identities."""

from netpolgraph.graph.identity import NodeType, generate_link_id, generate_node_id
from netpolgraph.policy.models import Direction, IPBlock, Selector

WEB = Selector(match_labels={"app": "web"})
PROD = Selector(match_labels={"env": "prod"})


def test_pod_id_depends_on_namespace_and_selector():
    a = generate_node_id(NodeType.POD, "shop", {"pod_selector": WEB}, "p1", True)
    b = generate_node_id(NodeType.POD, "shop", {"pod_selector": WEB}, "p2", True)
    c = generate_node_id(NodeType.POD, "other", {"pod_selector": WEB}, "p1", True)
    assert a == b == 'pod:shop:{"matchLabels":{"app":"web"}}'
    assert a != c


def test_namespace_id_ignores_owning_namespace():
    a = generate_node_id(NodeType.NAMESPACE, "a", {"namespace_selector": PROD}, "p", True)
    b = generate_node_id(NodeType.NAMESPACE, "b", {"namespace_selector": PROD}, "p", True)
    assert a == b == 'namespace:{"matchLabels":{"env":"prod"}}'


def test_ip_block_id():
    details = {"ip_block": IPBlock(cidr="10.0.0.0/8")}
    assert generate_node_id(NodeType.IP_BLOCK, "x", details, "p", True) == "ipBlock:10.0.0.0/8"


def test_ip_block_without_cidr():
    details = {"ip_block": IPBlock()}
    assert generate_node_id(NodeType.IP_BLOCK, "x", details, "p", True) == "ipBlock:unknown"


def test_combined_id():
    details = {"namespace_selector": PROD, "pod_selector": WEB}
    assert generate_node_id(NodeType.COMBINED, "shop", details, "p", True) == (
        'combined:shop:{"matchLabels":{"env":"prod"}}:{"matchLabels":{"app":"web"}}'
    )


def test_anywhere_id():
    details = {"direction": Direction.EGRESS}
    assert generate_node_id(NodeType.ANYWHERE, "shop", details, "p", True) == "anywhere:egress"


def test_policy_suffix_without_deduplication():
    for node_type, details in [
        (NodeType.POD, {"pod_selector": WEB}),
        (NodeType.NAMESPACE, {"namespace_selector": PROD}),
        (NodeType.IP_BLOCK, {"ip_block": IPBlock(cidr="1.2.3.4/32")}),
        (NodeType.COMBINED, {"namespace_selector": PROD, "pod_selector": WEB}),
        (NodeType.ANYWHERE, {"direction": Direction.INGRESS}),
    ]:
        shared = generate_node_id(node_type, "ns", details, "p1", True)
        own = generate_node_id(node_type, "ns", details, "p1", False)
        other = generate_node_id(node_type, "ns", details, "p2", False)
        assert own == f"{shared}:policy:p1"
        assert own != other


def test_link_id():
    assert generate_link_id("a", "b", Direction.INGRESS, "p", True) == "link:a:b:ingress"
    assert (
        generate_link_id("a", "b", Direction.INGRESS, "p", False)
        == "link:a:b:ingress:policy:p"
    )
    assert generate_link_id("a", "b", Direction.EGRESS, "p", True) != generate_link_id(
        "a", "b", Direction.INGRESS, "p", True
    )
