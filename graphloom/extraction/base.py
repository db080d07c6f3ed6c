"""Interface to the language-model extraction collaborator."""

from abc import ABC, abstractmethod
from typing import Optional

from pydantic import BaseModel, ConfigDict

from graphloom.models.graph import PartialGraph


class ExtractionOptions(BaseModel):
    """Options passed through to the extractor."""

    model_config = ConfigDict(extra="allow")

    extract_entities: bool = True
    extract_relations: bool = True
    infer_properties: bool = False
    merge_entities: bool = True


class GraphExtractor(ABC):
    """Turns free text into a partial graph.

    Implementations may raise any exception; callers wrap failures in
    ExtractionFailedError.
    """

    @abstractmethod
    def extract(
        self, text: str, options: Optional[ExtractionOptions] = None
    ) -> PartialGraph:
        pass
