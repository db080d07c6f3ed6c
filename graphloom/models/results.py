"""Result models returned by merge operations."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field


class MergeResult(BaseModel):
    """Outcome of one merge operation."""

    batch_id: Optional[str] = None
    nodes_inserted: int = 0
    nodes_merged: int = 0
    edges_added: int = 0
    synthetic_edge_id: Optional[str] = None
    inserted_node_ids: List[str] = Field(default_factory=list)
    merged_node_ids: List[str] = Field(default_factory=list)
    remapping: Dict[str, str] = Field(default_factory=dict)
    anchor_node_id: Optional[str] = None

    @property
    def is_noop(self) -> bool:
        return self.batch_id is None

    @property
    def synthesized_bridge(self) -> bool:
        return self.synthetic_edge_id is not None


class SubgraphMembers(BaseModel):
    """Node and edge ids tagged with one batch id."""

    batch_id: str
    node_ids: List[str] = Field(default_factory=list)
    edge_ids: List[str] = Field(default_factory=list)

    def __len__(self) -> int:
        return len(self.node_ids) + len(self.edge_ids)
