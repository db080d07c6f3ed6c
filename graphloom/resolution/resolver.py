"""Entity resolution: decide merge-vs-insert for every incoming node."""

from __future__ import annotations

import math
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from graphloom.models.graph import Node, numeric_suffix
from graphloom.resolution.scoring import CandidateScorer
from graphloom.utils.config import ScoringConfig


class ResolutionAction(str, Enum):
    MERGE = "merge"
    INSERT = "insert"


class ResolutionDecision(BaseModel):
    """Decision for a single incoming node."""

    incoming_id: str
    action: ResolutionAction
    target_id: str
    score: float = 0.0


class Resolution(BaseModel):
    """Total resolution of an incoming node set.

    ``remapping`` maps every incoming id to its canonical id: the existing
    node for merges, the incoming id itself for inserts.
    """

    remapping: Dict[str, str] = Field(default_factory=dict)
    to_insert: List[Node] = Field(default_factory=list)
    decisions: List[ResolutionDecision] = Field(default_factory=list)

    @property
    def merges(self) -> Dict[str, str]:
        return {
            decision.incoming_id: decision.target_id
            for decision in self.decisions
            if decision.action == ResolutionAction.MERGE
        }

    def decision_for(self, incoming_id: str) -> Optional[ResolutionDecision]:
        for decision in self.decisions:
            if decision.incoming_id == incoming_id:
                return decision
        return None


def _creation_key(node: Node, position: int) -> Tuple[float, int]:
    """Order existing nodes by creation: lowest numeric suffix, then insertion order."""
    suffix = numeric_suffix(node.id)
    return (suffix if suffix is not None else math.inf, position)


class EntityResolver:
    """Apply CandidateScorer across an incoming node set.

    Incoming nodes are compared only against existing nodes, never against
    each other. The resolver never mutates its inputs.
    """

    def __init__(
        self,
        config: ScoringConfig | None = None,
        scorer: CandidateScorer | None = None,
    ) -> None:
        self.config = config or ScoringConfig()
        self.scorer = scorer or CandidateScorer(self.config)

    def resolve(self, existing_nodes: Sequence[Node], incoming_nodes: Sequence[Node]) -> Resolution:
        by_type: Dict[str, List[Tuple[Tuple[float, int], Node]]] = {}
        for position, node in enumerate(existing_nodes):
            by_type.setdefault(node.type, []).append((_creation_key(node, position), node))

        resolution = Resolution()
        for incoming in incoming_nodes:
            best_id, best_score = self._best_candidate(incoming, by_type.get(incoming.type, []))

            if best_id is not None and best_score >= self.config.merge_threshold:
                decision = ResolutionDecision(
                    incoming_id=incoming.id,
                    action=ResolutionAction.MERGE,
                    target_id=best_id,
                    score=best_score,
                )
            else:
                decision = ResolutionDecision(
                    incoming_id=incoming.id,
                    action=ResolutionAction.INSERT,
                    target_id=incoming.id,
                    score=best_score,
                )
                resolution.to_insert.append(incoming)

            logger.debug(
                "Resolved {} -> {} ({}, score={:.2f})",
                incoming.id,
                decision.target_id,
                decision.action.value,
                decision.score,
            )
            resolution.decisions.append(decision)
            resolution.remapping[incoming.id] = decision.target_id

        return resolution

    def _best_candidate(
        self,
        incoming: Node,
        candidates: List[Tuple[Tuple[float, int], Node]],
    ) -> Tuple[Optional[str], float]:
        best_id: Optional[str] = None
        best_key: Tuple[float, int] = (math.inf, 0)
        best_score = 0.0

        for key, existing in candidates:
            score = self.scorer.score(existing, incoming)
            if score <= 0:
                continue
            # Ties go to the earliest-created existing node.
            if score > best_score or (score == best_score and key < best_key):
                best_id = existing.id
                best_key = key
                best_score = score

        return best_id, best_score
