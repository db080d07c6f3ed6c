"""Web-search expansion anchored to an existing node."""

from __future__ import annotations

from typing import List, Optional

from loguru import logger
from pydantic import BaseModel, Field

from graphloom.exceptions import ExtractionFailedError, UnknownAnchorError
from graphloom.extraction.base import ExtractionOptions, GraphExtractor
from graphloom.merge.engine import GraphHandle
from graphloom.models.graph import Edge, Graph, Node, PartialGraph
from graphloom.models.results import MergeResult

# Confidence given to searched relationships that arrive without one.
DEFAULT_EDGE_CONFIDENCE = 0.7


class NodeNeighborhood(BaseModel):
    """A node with its incident edges and adjacent nodes."""

    node: Node
    edges: List[Edge] = Field(default_factory=list)
    neighbors: List[Node] = Field(default_factory=list)


def node_neighborhood(graph: Graph, node_id: str) -> NodeNeighborhood:
    """Collect the direct connections of a node.

    Raises:
        UnknownAnchorError: If the node is not in the graph
    """
    node = graph.get_node(node_id)
    if node is None:
        raise UnknownAnchorError(node_id)

    edges = [edge for edge in graph.edges if node_id in (edge.source, edge.target)]
    neighbor_ids = {edge.target if edge.source == node_id else edge.source for edge in edges}
    neighbors = [n for n in graph.nodes if n.id in neighbor_ids]
    return NodeNeighborhood(node=node, edges=edges, neighbors=neighbors)


def build_expansion_query(graph: Graph, node_id: str) -> str:
    """Describe a node and its relationships as a web-search query."""
    hood = node_neighborhood(graph, node_id)
    node = hood.node
    type_part = f" ({node.type})" if node.type else ""
    node_info = f"{node.label}{type_part}: {node.display_name() or 'Unknown'}"

    by_id = {n.id: n for n in hood.neighbors}
    lines: List[str] = []
    for edge in hood.edges:
        outgoing = edge.source == node_id
        other = by_id.get(edge.target if outgoing else edge.source)
        if other is None:
            continue
        direction = "->" if outgoing else "<-"
        props = ""
        if edge.properties:
            props = " [" + ", ".join(f"{k}: {v}" for k, v in edge.properties.items()) + "]"
        other_type = f" ({other.type})" if other.type else ""
        other_name = other.display_name() or other.label
        lines.append(f"{direction} {edge.label}{props} {other_name}{other_type}")

    return f"Search for information about {node_info}\n\nRelationships:\n" + "\n".join(lines)


class ExpansionService:
    """Expand the graph around one node using a search-backed extractor."""

    def __init__(
        self,
        extractor: GraphExtractor,
        default_edge_confidence: float = DEFAULT_EDGE_CONFIDENCE,
    ) -> None:
        self.extractor = extractor
        self.default_edge_confidence = default_edge_confidence

    def expand(
        self,
        handle: GraphHandle,
        anchor_node_id: str,
        options: Optional[ExtractionOptions] = None,
    ) -> MergeResult:
        """Search around ``anchor_node_id`` and merge the result anchored there.

        Extraction runs outside the handle's lock; only the merge is serialized.

        Raises:
            UnknownAnchorError: If the anchor is not in the graph
            ExtractionFailedError: If the extractor fails
            MalformedPartialGraphError: If the extracted graph cannot be merged
        """
        query = build_expansion_query(handle.snapshot(), anchor_node_id)
        logger.info("Expanding from node {}", anchor_node_id)
        logger.debug("Expansion query:\n{}", query)

        try:
            partial = self.extractor.extract(query, options)
        except ExtractionFailedError:
            raise
        except Exception as exc:
            raise ExtractionFailedError(f"Expansion extraction failed: {exc}") from exc

        return handle.apply(self._with_edge_confidence(partial), anchor_node_id=anchor_node_id)

    def _with_edge_confidence(self, partial: PartialGraph) -> PartialGraph:
        result = partial.model_copy(deep=True)
        for edge in result.edges:
            edge.properties.setdefault("confidence_score", self.default_edge_confidence)
        return result
