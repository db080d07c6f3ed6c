"""Graph data models."""

from graphloom.models.graph import (
    DEFAULT_NAME_KEYS,
    Edge,
    Graph,
    Node,
    PartialGraph,
    Properties,
    PropertyValue,
    numeric_suffix,
)
from graphloom.models.results import MergeResult, SubgraphMembers

__all__ = [
    "DEFAULT_NAME_KEYS",
    "Edge",
    "Graph",
    "MergeResult",
    "Node",
    "PartialGraph",
    "Properties",
    "PropertyValue",
    "SubgraphMembers",
    "numeric_suffix",
]
