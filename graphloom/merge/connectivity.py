"""Keep anchored merges attached to the node that triggered them."""

from __future__ import annotations

import copy
from collections import deque
from typing import Dict, Optional, Sequence, Set, Tuple

from loguru import logger

from graphloom.exceptions import UnknownAnchorError
from graphloom.merge.identifiers import IdentifierAllocator
from graphloom.models.graph import Edge, Graph
from graphloom.utils.config import MergeConfig


def connected_component(graph: Graph, start_id: str) -> Set[str]:
    """Return node ids reachable from ``start_id``, treating edges as undirected."""
    adjacency: Dict[str, Set[str]] = {}
    for edge in graph.edges:
        adjacency.setdefault(edge.source, set()).add(edge.target)
        adjacency.setdefault(edge.target, set()).add(edge.source)

    seen = {start_id}
    queue = deque([start_id])
    while queue:
        current = queue.popleft()
        for neighbour in adjacency.get(current, ()):
            if neighbour not in seen:
                seen.add(neighbour)
                queue.append(neighbour)
    return seen


class ConnectivityGuarantor:
    """Bridge an anchor node to freshly merged material when no path exists."""

    def __init__(self, config: MergeConfig | None = None) -> None:
        self.config = config or MergeConfig()

    def ensure_connected(
        self,
        accumulator: Graph,
        anchor_node_id: Optional[str],
        new_node_ids: Sequence[str],
        batch_id: str,
    ) -> Tuple[Graph, Optional[str]]:
        """Add at most one ``anchor -[EXPANDED_TO]-> new node`` edge.

        Unanchored merges (``anchor_node_id is None``) are left untouched.

        Args:
            accumulator: Graph after the merge step
            anchor_node_id: Node that triggered the merge, or None
            new_node_ids: Ids introduced or touched by the merge, in merge order
            batch_id: Batch id for the synthetic edge

        Returns:
            Tuple of (graph, synthetic edge id or None)

        Raises:
            UnknownAnchorError: If the anchor is not in the graph
        """
        if anchor_node_id is None:
            return accumulator, None
        if not accumulator.has_node(anchor_node_id):
            raise UnknownAnchorError(anchor_node_id)

        candidates = [node_id for node_id in new_node_ids if node_id != anchor_node_id]
        if not candidates:
            return accumulator, None

        component = connected_component(accumulator, anchor_node_id)
        if any(node_id in component for node_id in candidates):
            return accumulator, None

        result = accumulator.model_copy(deep=True)
        namespace = batch_id if self.config.namespace_ids_by_batch else None
        edge_id = IdentifierAllocator(
            result.edge_ids(), self.config.edge_id_prefix, namespace=namespace
        ).allocate()
        result.edges.append(
            Edge(
                id=edge_id,
                source=anchor_node_id,
                target=candidates[0],
                label=self.config.synthetic_edge_label,
                properties=copy.deepcopy(self.config.synthetic_edge_properties),
                subgraph_ids=[batch_id],
            )
        )
        anchor = result.get_node(anchor_node_id)
        if anchor is not None:
            anchor.add_subgraph(batch_id)
        logger.warning(
            "No path from anchor {} to batch {}; added {} edge {} -> {}",
            anchor_node_id,
            batch_id,
            self.config.synthetic_edge_label,
            anchor_node_id,
            candidates[0],
        )
        return result, edge_id
