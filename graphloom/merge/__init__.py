"""Graph merge engine."""

from graphloom.merge.connectivity import ConnectivityGuarantor, connected_component
from graphloom.merge.engine import GraphHandle, MergeEngine
from graphloom.merge.identifiers import IdentifierAllocator
from graphloom.merge.merger import GraphMerger, check_partial_graph
from graphloom.merge.subgraphs import SubgraphRegistry

__all__ = [
    "ConnectivityGuarantor",
    "GraphHandle",
    "GraphMerger",
    "IdentifierAllocator",
    "MergeEngine",
    "SubgraphRegistry",
    "check_partial_graph",
    "connected_component",
]
