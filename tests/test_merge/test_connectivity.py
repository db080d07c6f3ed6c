"""ConnectivityGuarantor tests."""

from __future__ import annotations

import pytest

from graphloom.exceptions import UnknownAnchorError
from graphloom.merge.connectivity import ConnectivityGuarantor, connected_component
from graphloom.models.graph import Edge, Graph, Node
from graphloom.utils.config import MergeConfig


def _graph() -> Graph:
    return Graph(
        nodes=[
            Node(id="n1", subgraph_ids=["sg1"]),
            Node(id="n2", subgraph_ids=["sg1"]),
            Node(id="n3", subgraph_ids=["sg2"]),
            Node(id="n4", subgraph_ids=["sg2"]),
        ],
        edges=[
            Edge(id="e1", source="n1", target="n2", label="KNOWS", subgraph_ids=["sg1"]),
            Edge(id="e2", source="n3", target="n2", label="KNOWS", subgraph_ids=["sg2"]),
        ],
        subgraph_counter=2,
    )


def test_connected_component_ignores_direction() -> None:
    assert connected_component(_graph(), "n1") == {"n1", "n2", "n3"}
    assert connected_component(_graph(), "n4") == {"n4"}


def test_unanchored_merge_is_a_noop() -> None:
    graph = _graph()
    result, edge_id = ConnectivityGuarantor().ensure_connected(graph, None, ["n4"], "sg2")
    assert result is graph
    assert edge_id is None


def test_unknown_anchor_raises() -> None:
    with pytest.raises(UnknownAnchorError) as excinfo:
        ConnectivityGuarantor().ensure_connected(_graph(), "missing", ["n4"], "sg2")
    assert excinfo.value.anchor_id == "missing"


def test_indirect_path_satisfies_connectivity() -> None:
    graph = _graph()
    result, edge_id = ConnectivityGuarantor().ensure_connected(graph, "n1", ["n3"], "sg2")
    assert edge_id is None
    assert result.edges == graph.edges


def test_one_connected_new_node_is_enough() -> None:
    result, edge_id = ConnectivityGuarantor().ensure_connected(
        _graph(), "n1", ["n4", "n3"], "sg2"
    )
    assert edge_id is None
    assert len(result.edges) == 2


def test_bridges_to_first_new_node_when_disconnected() -> None:
    graph = Graph(
        nodes=[*_graph().nodes, Node(id="n5", subgraph_ids=["sg2"])],
        edges=_graph().edges,
        subgraph_counter=2,
    )

    result, edge_id = ConnectivityGuarantor().ensure_connected(graph, "n1", ["n4", "n5"], "sg2")

    assert edge_id == "e3"
    assert len(result.edges) == len(graph.edges) + 1
    bridge = result.edges[-1]
    assert (bridge.source, bridge.target, bridge.label) == ("n1", "n4", "EXPANDED_TO")
    assert bridge.subgraph_ids == ["sg2"]
    assert bridge.properties == {"synthetic": True, "via": "web search", "confidence_score": 0.85}
    assert result.get_node("n1").subgraph_ids == ["sg1", "sg2"]
    assert "n4" in connected_component(result, "n1")


def test_anchor_alone_or_empty_new_nodes_is_a_noop() -> None:
    graph = _graph()
    guarantor = ConnectivityGuarantor()
    assert guarantor.ensure_connected(graph, "n1", [], "sg2") == (graph, None)
    assert guarantor.ensure_connected(graph, "n1", ["n1"], "sg2") == (graph, None)


def test_bridge_properties_are_configurable() -> None:
    graph = Graph(
        nodes=[Node(id="n1", subgraph_ids=["sg1"]), Node(id="n2", subgraph_ids=["sg2"])],
        subgraph_counter=2,
    )
    guarantor = ConnectivityGuarantor(
        MergeConfig(synthetic_edge_label="RELATED_TO", synthetic_edge_properties={"via": "wiki"})
    )

    result, _ = guarantor.ensure_connected(graph, "n1", ["n2"], "sg2")

    assert (result.edges[0].label, result.edges[0].properties) == ("RELATED_TO", {"via": "wiki"})
