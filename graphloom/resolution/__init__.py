"""Entity resolution: scoring and merge decisions."""

from graphloom.resolution.resolver import (
    EntityResolver,
    Resolution,
    ResolutionAction,
    ResolutionDecision,
)
from graphloom.resolution.scoring import CandidateScorer, normalize_name

__all__ = [
    "CandidateScorer",
    "EntityResolver",
    "Resolution",
    "ResolutionAction",
    "ResolutionDecision",
    "normalize_name",
]
