"""Load NetworkPolicy records from YAML or JSON text."""

from __future__ import annotations

import logging
import re
from pathlib import Path

import yaml

from netpolgraph.policy.models import (
    IPBlock,
    MatchExpression,
    NetworkPolicy,
    Peer,
    PolicyType,
    PortSpec,
    Rule,
    Selector,
)

logger = logging.getLogger(__name__)

_DOCUMENT_SEPARATOR = re.compile(r"^---$", re.MULTILINE)
_POLICY_KIND = "NetworkPolicy"
_POLICY_TYPES = {t.value for t in PolicyType}


class PolicyParseError(ValueError):
    """Raised when a policy document cannot be decoded."""


def load_policies(path: str | Path) -> list[NetworkPolicy]:
    """Load every NetworkPolicy found in a file."""
    text = Path(path).read_text(encoding="utf-8")
    return load_policies_from_string(text)


def load_policies_from_string(text: str) -> list[NetworkPolicy]:
    """Parse multi-document YAML (or JSON) text into policies."""
    policies: list[NetworkPolicy] = []
    documents = [d.strip() for d in _DOCUMENT_SEPARATOR.split(text) if d.strip()]
    for index, doc in enumerate(documents):
        try:
            data = yaml.safe_load(doc)
        except yaml.YAMLError as e:
            raise PolicyParseError(f"Document {index} is not valid YAML: {e}") from e
        for item in _iter_items(data):
            if not isinstance(item, dict):
                logger.debug("Skipping non-mapping item in document %d", index)
                continue
            kind = item.get("kind", _POLICY_KIND)
            if kind != _POLICY_KIND:
                logger.debug("Skipping %s in document %d", kind, index)
                continue
            policies.append(parse_network_policy(item))
    return policies


def parse_network_policy(data: dict) -> NetworkPolicy:
    """Build a NetworkPolicy from a decoded Kubernetes object."""
    metadata = _as_dict(data.get("metadata"))
    spec = _as_dict(data.get("spec"))

    return NetworkPolicy(
        name=_scalar_text(metadata.get("name")) or "unnamed-policy",
        namespace=_scalar_text(metadata.get("namespace")) or "default",
        pod_selector=_parse_selector(spec.get("podSelector")) or Selector(),
        ingress=_parse_rules(spec.get("ingress"), "from"),
        egress=_parse_rules(spec.get("egress"), "to"),
        policy_types=tuple(
            PolicyType(t)
            for t in _as_list(spec.get("policyTypes"))
            if isinstance(t, str) and t in _POLICY_TYPES
        ),
    )


def _iter_items(data) -> list:
    if data is None:
        return []
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return data["items"]
    return [data]


def _as_list(value) -> list:
    return value if isinstance(value, list) else []


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def _scalar_text(value) -> str:
    """Render a decoded YAML scalar the way it was written."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)


def _parse_rules(rules_data, peers_key: str) -> tuple[Rule, ...]:
    rules: list[Rule] = []
    for r in _as_list(rules_data):
        if not isinstance(r, dict):
            continue
        peers = tuple(
            _parse_peer(p) for p in _as_list(r.get(peers_key)) if isinstance(p, dict)
        )
        ports_raw = r.get("ports")
        ports = None
        if isinstance(ports_raw, list):
            ports = tuple(_parse_port(p) for p in ports_raw if isinstance(p, dict))
        rules.append(Rule(peers=peers, ports=ports))
    return tuple(rules)


def _parse_peer(data: dict) -> Peer:
    ip_block = None
    ip_data = data.get("ipBlock")
    if isinstance(ip_data, dict):
        ip_block = IPBlock(
            cidr=ip_data.get("cidr"),
            except_=tuple(_as_list(ip_data.get("except"))),
        )
    return Peer(
        pod_selector=_parse_selector(data.get("podSelector")),
        namespace_selector=_parse_selector(data.get("namespaceSelector")),
        ip_block=ip_block,
    )


def _parse_selector(data) -> Selector | None:
    if not isinstance(data, dict):
        return None
    labels = data.get("matchLabels")
    expressions = data.get("matchExpressions")
    return Selector(
        match_labels=(
            {_scalar_text(k): _scalar_text(v) for k, v in labels.items()}
            if isinstance(labels, dict)
            else None
        ),
        match_expressions=(
            tuple(
                MatchExpression(
                    key=_scalar_text(e.get("key")),
                    operator=_scalar_text(e.get("operator")),
                    values=tuple(_scalar_text(v) for v in _as_list(e.get("values"))),
                )
                for e in expressions
                if isinstance(e, dict)
            )
            if isinstance(expressions, list)
            else None
        ),
    )


def _parse_port(data: dict) -> PortSpec:
    return PortSpec(
        port=data.get("port"),
        end_port=data.get("endPort"),
        protocol=data.get("protocol"),
    )
