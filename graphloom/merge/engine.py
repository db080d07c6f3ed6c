"""One-call merge operations and a lock-guarded accumulator handle."""

from __future__ import annotations

import threading
from typing import Optional, Tuple

from loguru import logger

from graphloom.exceptions import UnknownAnchorError
from graphloom.merge.connectivity import ConnectivityGuarantor
from graphloom.merge.merger import GraphMerger, check_partial_graph
from graphloom.merge.subgraphs import SubgraphRegistry
from graphloom.models.graph import Graph, PartialGraph
from graphloom.models.results import MergeResult, SubgraphMembers
from graphloom.resolution.resolver import EntityResolver
from graphloom.utils.config import Config
from graphloom.utils.logger import log_metric


class MergeEngine:
    """Run complete merge operations.

    Each call allocates one batch id, resolves, merges and (for anchored
    merges) bridges the anchor, all against copies. The input graph is
    returned untouched on any error.
    """

    def __init__(self, config: Config | None = None) -> None:
        self.config = config or Config()
        self.registry = SubgraphRegistry(self.config.merge)
        self.resolver = EntityResolver(self.config.scoring)
        self.merger = GraphMerger(self.config.merge)
        self.guarantor = ConnectivityGuarantor(self.config.merge)

    def apply(
        self,
        accumulator: Graph,
        partial: PartialGraph,
        *,
        anchor_node_id: Optional[str] = None,
        replace_if_empty: bool = False,
    ) -> Tuple[Graph, MergeResult]:
        """Fold ``partial`` into ``accumulator``.

        Args:
            accumulator: Current graph state
            partial: Extracted nodes and edges
            anchor_node_id: Existing node that triggered the merge (web-search
                expansion). None for unanchored merges.
            replace_if_empty: Adopt ``partial`` as-is when the accumulator is
                empty and the merge is unanchored

        Returns:
            Tuple of (new accumulator, merge result)

        Raises:
            UnknownAnchorError: If ``anchor_node_id`` is not in the accumulator
            MalformedPartialGraphError: If the partial graph cannot be merged
        """
        if anchor_node_id is not None and not accumulator.has_node(anchor_node_id):
            raise UnknownAnchorError(anchor_node_id)

        if partial.is_empty():
            logger.debug("Empty partial graph; accumulator unchanged")
            return accumulator, MergeResult(anchor_node_id=anchor_node_id)

        check_partial_graph(partial)
        batch_id, working = self.registry.next_batch_id(accumulator)

        if replace_if_empty and anchor_node_id is None and accumulator.is_empty():
            merged, result = self.merger.replace(working, partial, batch_id)
        else:
            resolution = self.resolver.resolve(working.nodes, partial.nodes)
            merged, result = self.merger.merge(working, partial, resolution, batch_id)
            merged, synthetic_edge_id = self.guarantor.ensure_connected(
                merged,
                anchor_node_id,
                result.inserted_node_ids + result.merged_node_ids,
                batch_id,
            )
            if synthetic_edge_id is not None:
                result.synthetic_edge_id = synthetic_edge_id
                result.edges_added += 1

        result.anchor_node_id = anchor_node_id
        log_metric("merge.nodes_inserted", result.nodes_inserted, batch_id=batch_id)
        log_metric("merge.nodes_merged", result.nodes_merged, batch_id=batch_id)
        return merged, result

    def members_of(self, accumulator: Graph, batch_id: str) -> SubgraphMembers:
        return self.registry.members_of(accumulator, batch_id)


class GraphHandle:
    """Owned accumulator with single-writer access.

    Every read-resolve-merge-write cycle runs under one lock, so concurrent
    collaborators never decide against a node set another merge is about to
    change. Extraction should happen outside the handle; only its result is
    applied here.
    """

    def __init__(
        self,
        graph: Graph | None = None,
        engine: MergeEngine | None = None,
        config: Config | None = None,
    ) -> None:
        self.engine = engine or MergeEngine(config)
        self._graph = graph.model_copy(deep=True) if graph is not None else Graph()
        self._lock = threading.RLock()

    def apply(
        self,
        partial: PartialGraph,
        *,
        anchor_node_id: Optional[str] = None,
        replace_if_empty: bool = False,
    ) -> MergeResult:
        with self._lock:
            updated, result = self.engine.apply(
                self._graph,
                partial,
                anchor_node_id=anchor_node_id,
                replace_if_empty=replace_if_empty,
            )
            self._graph = updated
            return result

    def snapshot(self) -> Graph:
        """Deep copy of the current graph."""
        with self._lock:
            return self._graph.model_copy(deep=True)

    def members_of(self, batch_id: str) -> SubgraphMembers:
        with self._lock:
            return self.engine.members_of(self._graph, batch_id)

    def has_node(self, node_id: str) -> bool:
        with self._lock:
            return self._graph.has_node(node_id)

    @property
    def subgraph_counter(self) -> int:
        with self._lock:
            return self._graph.subgraph_counter
