"""Collision-free identifier allocation."""

from __future__ import annotations

from typing import Iterable, Optional, Set

from graphloom.models.graph import numeric_suffix


class IdentifierAllocator:
    """Allocate ids of the form ``<prefix><N>`` that are unused in a graph.

    ``N`` starts one past the highest numeric suffix among the taken ids, so
    allocated ids keep sorting in creation order. When ``namespace`` is set
    (a batch id) ids become ``<namespace>_<prefix><N>``.
    """

    def __init__(
        self,
        taken: Iterable[str],
        prefix: str,
        namespace: Optional[str] = None,
    ) -> None:
        self.prefix = prefix
        self.namespace = namespace
        self._taken: Set[str] = set(taken)
        suffixes = [numeric_suffix(identifier) for identifier in self._taken]
        self._next = max((s for s in suffixes if s is not None), default=0) + 1

    def allocate(self) -> str:
        while True:
            candidate = self._format(self._next)
            self._next += 1
            if candidate not in self._taken:
                self._taken.add(candidate)
                return candidate

    def reserve(self, identifier: str) -> None:
        """Mark an externally chosen id as taken."""
        self._taken.add(identifier)
        suffix = numeric_suffix(identifier)
        if suffix is not None and suffix >= self._next:
            self._next = suffix + 1

    def is_taken(self, identifier: str) -> bool:
        return identifier in self._taken

    def _format(self, number: int) -> str:
        base = f"{self.prefix}{number}"
        return f"{self.namespace}_{base}" if self.namespace else base
