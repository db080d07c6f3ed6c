"""Graph merge and entity-resolution engine for incrementally extracted knowledge graphs."""

from graphloom.exceptions import (
    ExtractionFailedError,
    GraphMergeError,
    MalformedPartialGraphError,
    SegmentProcessingError,
    UnknownAnchorError,
)
from graphloom.merge import GraphHandle, MergeEngine
from graphloom.models import Edge, Graph, MergeResult, Node, PartialGraph, SubgraphMembers

__version__ = "0.1.0"

__all__ = [
    "Edge",
    "ExtractionFailedError",
    "Graph",
    "GraphHandle",
    "GraphMergeError",
    "MalformedPartialGraphError",
    "MergeEngine",
    "MergeResult",
    "Node",
    "PartialGraph",
    "SegmentProcessingError",
    "SubgraphMembers",
    "UnknownAnchorError",
]
