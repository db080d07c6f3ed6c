"""Pydantic models for labeled property graphs."""

from __future__ import annotations

import re
from typing import Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, JsonValue, model_validator

# Property values are a closed variant: str | int | float | bool | None | list | nested map.
PropertyValue = JsonValue
Properties = Dict[str, PropertyValue]

DEFAULT_NAME_KEYS = ("name", "title", "label")

_NUMERIC_SUFFIX = re.compile(r"(\d+)$")


def numeric_suffix(identifier: str) -> Optional[int]:
    """Return the trailing integer of an id such as ``n12`` or ``sg3``."""
    match = _NUMERIC_SUFFIX.search(identifier)
    return int(match.group(1)) if match else None


class _GraphElement(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    label: str = ""
    properties: Properties = Field(default_factory=dict)
    subgraph_ids: List[str] = Field(default_factory=list, alias="subgraphIds")

    def add_subgraph(self, batch_id: str) -> None:
        if batch_id not in self.subgraph_ids:
            self.subgraph_ids.append(batch_id)


class Node(_GraphElement):
    """Entity node.

    ``x``/``y`` belong to the rendering layer and are carried through merges
    untouched.
    """

    type: str = ""
    x: Optional[float] = None
    y: Optional[float] = None

    def display_name(self, name_keys: Sequence[str] = DEFAULT_NAME_KEYS) -> Optional[str]:
        """Return the first non-empty recognized name property, if any."""
        for key in name_keys:
            value = self.properties.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None


class Edge(_GraphElement):
    """Directed, labeled relationship between two nodes."""

    source: str
    target: str


class PartialGraph(BaseModel):
    """Nodes and edges produced by one extraction call, not yet merged."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges


class Graph(BaseModel):
    """Accumulated graph state.

    Node and edge ids are unique and every edge endpoint references a node in
    the same graph. ``subgraph_counter`` is the source of the next batch id.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    nodes: List[Node] = Field(default_factory=list)
    edges: List[Edge] = Field(default_factory=list)
    subgraph_counter: int = Field(default=0, ge=0, alias="subgraphCounter")
    metadata: Properties = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_integrity(self) -> "Graph":
        node_ids = _unique_ids(self.nodes, "node")
        _unique_ids(self.edges, "edge")
        for edge in self.edges:
            if edge.source not in node_ids or edge.target not in node_ids:
                raise ValueError(
                    f"Edge {edge.id!r} references a missing node "
                    f"({edge.source!r} -> {edge.target!r})"
                )
        return self

    def is_empty(self) -> bool:
        return not self.nodes and not self.edges

    def node_ids(self) -> List[str]:
        return [node.id for node in self.nodes]

    def edge_ids(self) -> List[str]:
        return [edge.id for edge in self.edges]

    def get_node(self, node_id: str) -> Optional[Node]:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def has_node(self, node_id: str) -> bool:
        return self.get_node(node_id) is not None


def _unique_ids(elements: Iterable[_GraphElement], kind: str) -> set[str]:
    seen: set[str] = set()
    for element in elements:
        if element.id in seen:
            raise ValueError(f"Duplicate {kind} id {element.id!r}")
        seen.add(element.id)
    return seen
