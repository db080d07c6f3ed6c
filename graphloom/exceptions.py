"""Graph merge exceptions."""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from graphloom.models.graph import Graph


class GraphMergeError(Exception):
    """Base exception for merge engine errors."""

    pass


class MalformedPartialGraphError(GraphMergeError):
    """Raised when an extracted partial graph cannot be merged consistently.

    Typical causes are edges whose endpoints resolve to no node in the merged
    graph and partial graphs that reuse a node id.
    """

    def __init__(self, message: str, *, element_id: Optional[str] = None):
        super().__init__(message)
        self.element_id = element_id


class UnknownAnchorError(GraphMergeError):
    """Raised when an anchored operation names a node that is not in the graph."""

    def __init__(self, anchor_id: str):
        super().__init__(f"Anchor node {anchor_id!r} does not exist in the graph")
        self.anchor_id = anchor_id


class ExtractionFailedError(GraphMergeError):
    """Raised when the extraction collaborator fails or returns unusable output."""

    def __init__(self, message: str, *, segment_index: Optional[int] = None):
        super().__init__(message)
        self.segment_index = segment_index


class SegmentProcessingError(GraphMergeError):
    """Raised by the segment orchestrator when asked to fail loudly."""

    def __init__(
        self,
        segment_index: int,
        cause: Exception,
        accumulator: "Graph",
    ):
        super().__init__(f"Segment {segment_index} failed: {cause}")
        self.segment_index = segment_index
        self.cause = cause
        self.accumulator = accumulator
