"""Extraction collaborator boundary."""

from graphloom.extraction.base import ExtractionOptions, GraphExtractor
from graphloom.extraction.expansion import (
    ExpansionService,
    NodeNeighborhood,
    build_expansion_query,
    node_neighborhood,
)
from graphloom.extraction.parser import parse_graph_response

__all__ = [
    "ExpansionService",
    "ExtractionOptions",
    "GraphExtractor",
    "NodeNeighborhood",
    "build_expansion_query",
    "node_neighborhood",
    "parse_graph_response",
]
