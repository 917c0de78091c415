"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest

from netpolgraph.policy.models import (
    IPBlock,
    NetworkPolicy,
    Peer,
    PortSpec,
    Rule,
    Selector,
)


def pod(**labels: str) -> Selector:
    return Selector(match_labels=dict(labels))


@pytest.fixture
def fixtures_dir() -> Path:
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def policies_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "policies.yaml"


@pytest.fixture
def broken_path(fixtures_dir: Path) -> Path:
    return fixtures_dir / "broken.yaml"


@pytest.fixture
def frontend_policy() -> NetworkPolicy:
    return NetworkPolicy(
        name="frontend",
        namespace="shop",
        pod_selector=pod(app="frontend"),
        ingress=(Rule(ports=(PortSpec(port=443, protocol="TCP"),)),),
        egress=(
            Rule(
                peers=(Peer(pod_selector=pod(app="backend")),),
                ports=(PortSpec(port=8080, protocol="TCP"),),
            ),
        ),
    )


@pytest.fixture
def backend_policy() -> NetworkPolicy:
    return NetworkPolicy(
        name="backend",
        namespace="shop",
        pod_selector=pod(app="backend", tier="api"),
        ingress=(
            Rule(
                peers=(Peer(pod_selector=pod(app="frontend")),),
                ports=(PortSpec(port=8080, protocol="TCP"),),
            ),
        ),
    )


@pytest.fixture
def egress_cidr_policy() -> NetworkPolicy:
    return NetworkPolicy(
        name="egress-cidr",
        namespace="shop",
        pod_selector=pod(app="worker"),
        egress=(
            Rule(peers=(Peer(ip_block=IPBlock(cidr="10.0.0.0/8", except_=("10.1.0.0/16",))),)),
        ),
    )
