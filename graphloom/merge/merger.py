"""Apply a resolution to fold a partial graph into the accumulator."""

from __future__ import annotations

import copy
from typing import Dict, List, Set, Tuple

from loguru import logger

from graphloom.exceptions import GraphMergeError, MalformedPartialGraphError
from graphloom.merge.identifiers import IdentifierAllocator
from graphloom.models.graph import Edge, Graph, Node, PartialGraph
from graphloom.models.results import MergeResult
from graphloom.resolution.resolver import Resolution, ResolutionAction, ResolutionDecision
from graphloom.utils.config import MergeConfig


def check_partial_graph(partial: PartialGraph) -> None:
    """Reject partial graphs that reuse a node id.

    Raises:
        MalformedPartialGraphError: On the first duplicated node id
    """
    seen: Set[str] = set()
    for node in partial.nodes:
        if node.id in seen:
            raise MalformedPartialGraphError(
                f"Partial graph contains duplicate node id {node.id!r}", element_id=node.id
            )
        seen.add(node.id)


class GraphMerger:
    """Fold a partial graph into a copy of the accumulator.

    The accumulator passed in is never modified; a new graph is returned only
    when every node and edge has been applied.
    """

    def __init__(self, config: MergeConfig | None = None) -> None:
        self.config = config or MergeConfig()

    def merge(
        self,
        accumulator: Graph,
        partial: PartialGraph,
        resolution: Resolution,
        batch_id: str,
    ) -> Tuple[Graph, MergeResult]:
        """Merge ``partial`` into ``accumulator`` according to ``resolution``.

        Args:
            accumulator: Current graph state
            partial: Extracted nodes and edges; incoming subgraph ids are ignored
            resolution: Merge-vs-insert decision for every incoming node
            batch_id: Batch id tagging every node and edge touched

        Returns:
            Tuple of (new accumulator, merge result)

        Raises:
            MalformedPartialGraphError: If a node id repeats or an edge endpoint
                names no node of the partial graph
        """
        if partial.is_empty():
            return accumulator, MergeResult()

        check_partial_graph(partial)
        decisions: Dict[str, ResolutionDecision] = {d.incoming_id: d for d in resolution.decisions}

        result = accumulator.model_copy(deep=True)
        node_index: Dict[str, Node] = {node.id: node for node in result.nodes}
        node_ids = IdentifierAllocator(
            node_index, self.config.node_id_prefix, namespace=self._namespace(batch_id)
        )

        remapping: Dict[str, str] = {}
        inserted: List[str] = []
        merged: List[str] = []

        for incoming in partial.nodes:
            decision = decisions.get(incoming.id)
            if decision is None:
                raise GraphMergeError(f"Resolution has no decision for node {incoming.id!r}")

            if decision.action == ResolutionAction.MERGE:
                target = node_index.get(decision.target_id)
                if target is None:
                    raise GraphMergeError(
                        f"Resolution merges {incoming.id!r} into unknown node {decision.target_id!r}"
                    )
                self._merge_properties(target, incoming)
                target.add_subgraph(batch_id)
                remapping[incoming.id] = target.id
                if target.id not in merged:
                    merged.append(target.id)
                continue

            new_id = node_ids.allocate()
            node = incoming.model_copy(
                deep=True, update={"id": new_id, "subgraph_ids": [batch_id]}
            )
            result.nodes.append(node)
            node_index[new_id] = node
            remapping[incoming.id] = new_id
            inserted.append(new_id)

        edge_ids = IdentifierAllocator(
            result.edge_ids(), self.config.edge_id_prefix, namespace=self._namespace(batch_id)
        )
        new_edges: List[Edge] = []
        for incoming_edge in partial.edges:
            # Endpoints must name nodes of this partial graph, never accumulator ids.
            for endpoint in (incoming_edge.source, incoming_edge.target):
                if endpoint not in remapping:
                    raise MalformedPartialGraphError(
                        f"Edge {incoming_edge.id!r} references unknown node {endpoint!r}",
                        element_id=incoming_edge.id,
                    )
            source = remapping[incoming_edge.source]
            target_id = remapping[incoming_edge.target]
            new_edges.append(
                incoming_edge.model_copy(
                    deep=True,
                    update={
                        "id": edge_ids.allocate(),
                        "source": source,
                        "target": target_id,
                        "subgraph_ids": [batch_id],
                    },
                )
            )
        result.edges.extend(new_edges)

        logger.info(
            "Merged batch {}: {} inserted, {} merged, {} edges",
            batch_id,
            len(inserted),
            len(merged),
            len(new_edges),
        )
        return result, MergeResult(
            batch_id=batch_id,
            nodes_inserted=len(inserted),
            nodes_merged=len(partial.nodes) - len(inserted),
            edges_added=len(new_edges),
            inserted_node_ids=inserted,
            merged_node_ids=merged,
            remapping=remapping,
        )

    def replace(
        self, accumulator: Graph, partial: PartialGraph, batch_id: str
    ) -> Tuple[Graph, MergeResult]:
        """Adopt ``partial`` as the content of an empty accumulator.

        Incoming node ids are kept. Edge ids are kept unless missing or
        repeated, in which case a fresh id is allocated.

        Raises:
            GraphMergeError: If the accumulator is not empty
            MalformedPartialGraphError: On duplicate node ids or dangling edges
        """
        if not accumulator.is_empty():
            raise GraphMergeError("Only an empty accumulator can be replaced")
        if partial.is_empty():
            return accumulator, MergeResult()

        check_partial_graph(partial)
        result = accumulator.model_copy(deep=True)
        result.nodes = [
            node.model_copy(deep=True, update={"subgraph_ids": [batch_id]})
            for node in partial.nodes
        ]
        node_ids = {node.id for node in result.nodes}

        edge_ids = IdentifierAllocator(
            [edge.id for edge in partial.edges if edge.id],
            self.config.edge_id_prefix,
            namespace=self._namespace(batch_id),
        )
        used: Set[str] = set()
        for edge in partial.edges:
            for endpoint in (edge.source, edge.target):
                if endpoint not in node_ids:
                    raise MalformedPartialGraphError(
                        f"Edge {edge.id!r} references unknown node {endpoint!r}",
                        element_id=edge.id,
                    )
            edge_id = edge.id if edge.id and edge.id not in used else edge_ids.allocate()
            used.add(edge_id)
            result.edges.append(
                edge.model_copy(deep=True, update={"id": edge_id, "subgraph_ids": [batch_id]})
            )

        logger.info(
            "Initialized graph from batch {}: {} nodes, {} edges",
            batch_id,
            len(result.nodes),
            len(result.edges),
        )
        return result, MergeResult(
            batch_id=batch_id,
            nodes_inserted=len(result.nodes),
            edges_added=len(result.edges),
            inserted_node_ids=[node.id for node in result.nodes],
            remapping={node.id: node.id for node in result.nodes},
        )

    def _namespace(self, batch_id: str) -> str | None:
        return batch_id if self.config.namespace_ids_by_batch else None

    @staticmethod
    def _merge_properties(target: Node, incoming: Node) -> None:
        # Existing values win on key conflicts.
        for key, value in incoming.properties.items():
            if key not in target.properties:
                target.properties[key] = copy.deepcopy(value)
