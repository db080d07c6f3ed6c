"""Extraction response parsing tests."""

from __future__ import annotations

import pytest

from graphloom.exceptions import ExtractionFailedError
from graphloom.extraction.parser import parse_graph_response

_REPLY = """Here is the graph you asked for:
```json
{
  "nodes": [
    {"id": "n1", "label": "Organization (Company)", "properties": {"name": "Acme Corp"}},
    {"id": "n2", "label": "Person", "type": "Entrepreneur",
     "properties": {"name": "Jane Martinez", "age": 42}, "subgraphIds": ["sg7"]}
  ],
  "edges": [
    {"id": "e1", "source": "n2", "target": "n1", "label": "LEADS",
     "properties": {"since": 2020}}
  ]
}
```
Let me know if you need anything else."""


def test_parses_graph_wrapped_in_prose_and_fences() -> None:
    partial = parse_graph_response(_REPLY)

    assert [node.id for node in partial.nodes] == ["n1", "n2"]
    assert partial.edges[0].source == "n2"
    assert partial.edges[0].properties == {"since": 2020}
    assert partial.nodes[1].properties["age"] == 42


def test_splits_label_detail_into_type() -> None:
    partial = parse_graph_response(_REPLY)

    acme, jane = partial.nodes
    assert (acme.label, acme.type) == ("Organization", "Company")
    assert (jane.label, jane.type) == ("Person", "Entrepreneur")


def test_label_detail_does_not_override_existing_type() -> None:
    partial = parse_graph_response(
        '{"nodes": [{"id": "n1", "label": "Location (City)", "type": "Capital"}], "edges": []}'
    )
    assert (partial.nodes[0].label, partial.nodes[0].type) == ("Location", "Capital")


def test_drops_incoming_provenance() -> None:
    partial = parse_graph_response(_REPLY)
    assert partial.nodes[1].subgraph_ids == []


@pytest.mark.parametrize(
    "raw",
    [
        "I could not find any entities.",
        '{"nodes": []}',
        '{"nodes": {}, "edges": []}',
        '{"nodes": [}, "edges": []}',
        '{"nodes": [{"label": "Person"}], "edges": []}',
        '{"nodes": ["n1"], "edges": []}',
    ],
)
def test_unusable_replies_raise(raw: str) -> None:
    with pytest.raises(ExtractionFailedError):
        parse_graph_response(raw)
