"""Selector canonicalization and the label-subset match heuristic."""

from __future__ import annotations

import json

from netpolgraph.policy.models import Selector

EMPTY_SELECTOR = "{}"


def normalize_selector(selector: Selector | None) -> str:
    """Encode a selector so that key and entry order do not matter.

    ``matchLabels`` keys are sorted, ``matchExpressions`` entries are sorted
    by key (then operator and values, so the result never depends on input
    order).
    """
    if selector is None:
        return EMPTY_SELECTOR

    canonical: dict = {}
    if selector.match_labels is not None:
        canonical["matchLabels"] = {
            k: selector.match_labels[k] for k in sorted(selector.match_labels)
        }
    if selector.match_expressions is not None:
        expressions = sorted(
            selector.match_expressions,
            key=lambda e: (e.key, e.operator, e.values),
        )
        canonical["matchExpressions"] = [e.to_dict() for e in expressions]
    return json.dumps(canonical, separators=(",", ":"), sort_keys=True)


def selector_matches(selector: Selector | None, target: Selector | None) -> bool:
    """Return True if every label in ``selector`` appears in ``target``.

    Only ``matchLabels`` take part. When either side has no ``matchLabels``
    the answer is "no match"; ``matchExpressions`` are never evaluated.
    """
    if selector is None or target is None:
        return False
    if selector.match_labels is None or target.match_labels is None:
        return False
    return all(
        key in target.match_labels and target.match_labels[key] == value
        for key, value in selector.match_labels.items()
    )
