"""Parse a language model's graph reply into a PartialGraph."""

from __future__ import annotations

import json
import re
from typing import Any, Dict, List

from loguru import logger
from pydantic import ValidationError

from graphloom.exceptions import ExtractionFailedError
from graphloom.models.graph import PartialGraph

# "Organization (Company)" -> ("Organization", "Company")
_LABEL_WITH_DETAIL = re.compile(r"^(.+?)\s*\((.+?)\)$")


def _extract_json_object(raw_text: str) -> str:
    start = raw_text.find("{")
    end = raw_text.rfind("}") + 1
    if start == -1 or end == 0 or start >= end:
        raise ExtractionFailedError("No JSON object found in extraction response")
    return raw_text[start:end]


def _normalize_node(node: Dict[str, Any]) -> Dict[str, Any]:
    label = node.get("label")
    if isinstance(label, str):
        match = _LABEL_WITH_DETAIL.match(label.strip())
        if match:
            node["label"] = match.group(1).strip()
            if not node.get("type"):
                node["type"] = match.group(2).strip()
    # Provenance comes from the merge engine, never from the extractor.
    node.pop("subgraphIds", None)
    node.pop("subgraph_ids", None)
    return node


def _strip_provenance(edge: Dict[str, Any]) -> Dict[str, Any]:
    edge.pop("subgraphIds", None)
    edge.pop("subgraph_ids", None)
    return edge


def parse_graph_response(raw_text: str) -> PartialGraph:
    """Parse the outermost JSON object of a model reply.

    Surrounding prose and code fences are ignored. The object must contain
    ``nodes`` and ``edges`` arrays.

    Args:
        raw_text: Model reply text

    Returns:
        Partial graph with normalized node labels

    Raises:
        ExtractionFailedError: If no usable graph can be parsed
    """
    payload = _extract_json_object(raw_text)
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as exc:
        raise ExtractionFailedError(f"Invalid JSON in extraction response: {exc}") from exc

    if not isinstance(data, dict):
        raise ExtractionFailedError("Extraction response is not a JSON object")
    nodes = data.get("nodes")
    edges = data.get("edges")
    if not isinstance(nodes, list) or not isinstance(edges, list):
        raise ExtractionFailedError("Extraction response must contain 'nodes' and 'edges' arrays")

    node_rows: List[Dict[str, Any]] = [_normalize_node(dict(n)) for n in nodes if isinstance(n, dict)]
    edge_rows: List[Dict[str, Any]] = [_strip_provenance(dict(e)) for e in edges if isinstance(e, dict)]
    if len(node_rows) != len(nodes) or len(edge_rows) != len(edges):
        raise ExtractionFailedError("Extraction response contains non-object nodes or edges")

    try:
        partial = PartialGraph(nodes=node_rows, edges=edge_rows)
    except ValidationError as exc:
        raise ExtractionFailedError(f"Extraction response failed validation: {exc}") from exc

    logger.debug(
        "Parsed extraction response: {} nodes, {} edges", len(partial.nodes), len(partial.edges)
    )
    return partial
