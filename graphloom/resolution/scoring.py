"""Merge-confidence scoring between an existing node and an incoming node."""

from __future__ import annotations

from typing import Optional

from graphloom.models.graph import Node
from graphloom.utils.config import ScoringConfig


def normalize_name(name: str) -> str:
    """Normalize a name for comparison (lowercase, strip whitespace)."""
    return name.lower().strip()


class CandidateScorer:
    """Pure scoring function over two nodes.

    Evidence and weights:

    - exact case-insensitive name match: ``exact_name_weight``
    - otherwise one name contained in the other (first-name-only mentions):
      ``partial_name_weight``
    - each other property present on both nodes with an equal value:
      ``shared_property_weight``, capped at ``shared_property_cap``

    The score is the earned weight divided by the weight attainable for the
    pair: the exact-name weight plus the property weight the shared keys could
    earn. Properties only one node carries are neither evidence for nor
    against a match, so an exact name with no contradicting properties scores
    1.0, and every shared key whose values differ lowers the score.

    Nodes of different ``type`` always score 0.
    """

    def __init__(self, config: ScoringConfig | None = None) -> None:
        self.config = config or ScoringConfig()

    def score(self, existing: Node, incoming: Node) -> float:
        if existing.type != incoming.type:
            return 0.0

        cfg = self.config
        earned = 0.0

        existing_name = self._name_of(existing)
        incoming_name = self._name_of(incoming)
        if existing_name and incoming_name:
            if existing_name == incoming_name:
                earned += cfg.exact_name_weight
            elif existing_name in incoming_name or incoming_name in existing_name:
                earned += cfg.partial_name_weight

        shared, equal = self._compare_properties(existing, incoming)
        earned += min(equal * cfg.shared_property_weight, cfg.shared_property_cap)

        attainable = cfg.exact_name_weight + min(
            shared * cfg.shared_property_weight, cfg.shared_property_cap
        )
        if attainable <= 0:
            return 0.0
        return min(earned / attainable, 1.0)

    def _name_of(self, node: Node) -> Optional[str]:
        name = node.display_name(self.config.name_keys)
        return normalize_name(name) if name else None

    def _compare_properties(self, existing: Node, incoming: Node) -> tuple[int, int]:
        """Count non-name keys present on both nodes, and how many are equal."""
        name_keys = set(self.config.name_keys)
        shared = 0
        equal = 0
        for key, value in incoming.properties.items():
            if key in name_keys or key not in existing.properties:
                continue
            shared += 1
            if _values_equal(existing.properties[key], value):
                equal += 1
        return shared, equal


def _values_equal(left: object, right: object) -> bool:
    # True == 1 in Python; a boolean flag should not match a count.
    if isinstance(left, bool) != isinstance(right, bool):
        return False
    return left == right
