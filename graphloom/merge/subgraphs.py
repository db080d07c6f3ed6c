"""Subgraph (provenance batch) id lifecycle and membership queries."""

from __future__ import annotations

from typing import List, Tuple

from graphloom.models.graph import Graph, numeric_suffix
from graphloom.models.results import SubgraphMembers
from graphloom.utils.config import MergeConfig


class SubgraphRegistry:
    """Allocate batch ids from a graph's counter and read batch membership.

    Membership is always derived by scanning ``subgraph_ids`` on nodes and
    edges; no separate index is kept.
    """

    def __init__(self, config: MergeConfig | None = None) -> None:
        self.config = config or MergeConfig()

    def next_batch_id(self, accumulator: Graph) -> Tuple[str, Graph]:
        """Allocate the next batch id and return it with an updated copy of the graph.

        The counter is moved past any batch tag already present, so a stored
        graph whose counter lags behind its tags never hands out a used id.
        """
        counter = max(accumulator.subgraph_counter, self._highest_tag(accumulator)) + 1
        batch_id = f"{self.config.batch_id_prefix}{counter}"
        updated = accumulator.model_copy(deep=True)
        updated.subgraph_counter = counter
        return batch_id, updated

    def members_of(self, accumulator: Graph, batch_id: str) -> SubgraphMembers:
        return SubgraphMembers(
            batch_id=batch_id,
            node_ids=[node.id for node in accumulator.nodes if batch_id in node.subgraph_ids],
            edge_ids=[edge.id for edge in accumulator.edges if batch_id in edge.subgraph_ids],
        )

    def _highest_tag(self, accumulator: Graph) -> int:
        prefix = self.config.batch_id_prefix
        highest = 0
        for element in [*accumulator.nodes, *accumulator.edges]:
            for batch_id in element.subgraph_ids:
                number = batch_id[len(prefix):]
                if batch_id.startswith(prefix) and number.isdigit():
                    highest = max(highest, int(number))
        return highest

    def batch_ids(self, accumulator: Graph) -> List[str]:
        """List every batch id present in the graph, in allocation order."""
        seen: dict[str, None] = {}
        for element in [*accumulator.nodes, *accumulator.edges]:
            for batch_id in element.subgraph_ids:
                seen.setdefault(batch_id, None)

        def order(batch_id: str) -> Tuple[int, str]:
            suffix = numeric_suffix(batch_id)
            return (suffix if suffix is not None else -1, batch_id)

        return sorted(seen, key=order)
