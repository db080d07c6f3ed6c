"""Anchored web-search expansion tests."""

from __future__ import annotations

from typing import List, Optional

import pytest

from graphloom.exceptions import ExtractionFailedError, UnknownAnchorError
from graphloom.extraction.base import ExtractionOptions, GraphExtractor
from graphloom.extraction.expansion import (
    ExpansionService,
    build_expansion_query,
    node_neighborhood,
)
from graphloom.merge.engine import GraphHandle
from graphloom.models.graph import Edge, Graph, Node, PartialGraph


def _graph() -> Graph:
    return Graph(
        nodes=[
            Node(
                id="n1",
                label="Organization",
                type="Company",
                properties={"name": "Acme Corp"},
                subgraph_ids=["sg1"],
            ),
            Node(
                id="n2",
                label="Person",
                type="Employee",
                properties={"name": "Jane"},
                subgraph_ids=["sg1"],
            ),
            Node(
                id="n3",
                label="Location",
                type="City",
                properties={"name": "Phoenix"},
                subgraph_ids=["sg1"],
            ),
        ],
        edges=[
            Edge(
                id="e1",
                source="n2",
                target="n1",
                label="WORKS_FOR",
                properties={"since": 2020},
                subgraph_ids=["sg1"],
            ),
            Edge(id="e2", source="n1", target="n3", label="LOCATED_IN", subgraph_ids=["sg1"]),
        ],
        subgraph_counter=1,
    )


class _FakeExtractor(GraphExtractor):
    def __init__(self, partial: PartialGraph | None = None, error: Exception | None = None):
        self.partial = partial or PartialGraph()
        self.error = error
        self.queries: List[str] = []

    def extract(self, text: str, options: Optional[ExtractionOptions] = None) -> PartialGraph:
        self.queries.append(text)
        if self.error:
            raise self.error
        return self.partial


def test_node_neighborhood_collects_direct_connections() -> None:
    hood = node_neighborhood(_graph(), "n2")
    assert hood.node.id == "n2"
    assert [edge.id for edge in hood.edges] == ["e1"]
    assert [node.id for node in hood.neighbors] == ["n1"]


def test_node_neighborhood_unknown_node() -> None:
    with pytest.raises(UnknownAnchorError):
        node_neighborhood(_graph(), "n9")


def test_build_expansion_query_describes_relationships() -> None:
    query = build_expansion_query(_graph(), "n1")
    assert query == (
        "Search for information about Organization (Company): Acme Corp\n\n"
        "Relationships:\n"
        "<- WORKS_FOR [since: 2020] Jane (Employee)\n"
        "-> LOCATED_IN Phoenix (City)"
    )


def test_expand_merges_anchored_and_bridges() -> None:
    handle = GraphHandle(_graph())
    extractor = _FakeExtractor(
        PartialGraph(nodes=[Node(id="w1", label="Event", type="Conference", properties={"name": "AcmeCon"})])
    )

    result = ExpansionService(extractor).expand(handle, "n3")

    assert extractor.queries[0].startswith("Search for information about Location (City): Phoenix")
    assert result.anchor_node_id == "n3"
    assert result.batch_id == "sg2"
    graph = handle.snapshot()
    assert (graph.edges[-1].source, graph.edges[-1].label, graph.edges[-1].target) == (
        "n3",
        "EXPANDED_TO",
        "n4",
    )


def test_expand_wraps_extractor_failures() -> None:
    handle = GraphHandle(_graph())
    extractor = _FakeExtractor(error=RuntimeError("search backend down"))

    with pytest.raises(ExtractionFailedError):
        ExpansionService(extractor).expand(handle, "n1")

    assert handle.snapshot() == _graph()


def test_expand_unknown_anchor_does_not_call_extractor() -> None:
    extractor = _FakeExtractor()
    with pytest.raises(UnknownAnchorError):
        ExpansionService(extractor).expand(GraphHandle(_graph()), "n9")
    assert extractor.queries == []


def test_expand_defaults_edge_confidence() -> None:
    handle = GraphHandle(_graph())
    extractor = _FakeExtractor(
        PartialGraph(
            nodes=[
                Node(id="w1", label="Location", type="City", properties={"name": "Phoenix"}),
                Node(id="w2", label="Event", type="Conference", properties={"name": "AcmeCon"}),
                Node(id="w3", label="Person", type="Speaker", properties={"name": "Lee"}),
            ],
            edges=[
                Edge(id="x1", source="w2", target="w1", label="HELD_IN"),
                Edge(id="x2", source="w3", target="w2", label="SPEAKS_AT", properties={"confidence_score": 0.9}),
            ],
        )
    )

    ExpansionService(extractor).expand(handle, "n3")

    by_label = {edge.label: edge for edge in handle.snapshot().edges}
    assert by_label["HELD_IN"].properties == {"confidence_score": 0.7}
    assert by_label["SPEAKS_AT"].properties == {"confidence_score": 0.9}
    assert extractor.partial.edges[0].properties == {}
