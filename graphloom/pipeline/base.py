import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from graphloom.extraction.base import ExtractionOptions
from graphloom.merge.engine import GraphHandle
from graphloom.models.graph import PartialGraph
from graphloom.models.results import MergeResult


class TextSegment(BaseModel):
    """One user-defined slice of input text."""

    text: str
    name: str = ""
    options: ExtractionOptions = Field(default_factory=ExtractionOptions)


class SegmentContext(BaseModel):
    """Context object passed between the stages of one segment."""

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="allow")

    # Input
    segment_index: int
    total_segments: int
    segment: TextSegment
    handle: GraphHandle

    # Processing State
    partial_graph: Optional[PartialGraph] = None
    merge_result: Optional[MergeResult] = None

    # Stats
    stats: Dict[str, Any] = {}

    # Control flow
    skipped: bool = False
    skip_reason: Optional[str] = None

    @property
    def is_first(self) -> bool:
        return self.segment_index == 0

    def update_stats(self, key: str, value: Any, operation: str = "add") -> None:
        """Update a statistic value."""
        if operation == "add":
            self.stats[key] = self.stats.get(key, 0) + value
        elif operation == "set":
            self.stats[key] = value


class PipelineStage(ABC):
    """Abstract base class for pipeline stages."""

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def run(self, context: SegmentContext) -> SegmentContext:
        """Execute the stage logic."""
        pass


class Pipeline:
    """Runs a sequence of stages for one segment."""

    def __init__(self, stages: List[PipelineStage]):
        self.stages = stages

    def run(
        self,
        context: SegmentContext,
        on_stage: Optional[Callable[[PipelineStage, SegmentContext], None]] = None,
    ) -> SegmentContext:
        """Run all stages in sequence.

        Args:
            context: Segment context
            on_stage: Optional hook called before each stage starts
        """
        start_time = time.time()
        logger.debug(
            "Starting pipeline for segment {}/{}",
            context.segment_index + 1,
            context.total_segments,
        )

        stage: Optional[PipelineStage] = None
        try:
            for stage in self.stages:
                if context.skipped:
                    logger.info("Skipping remaining stages: {}", context.skip_reason)
                    break

                stage_start = time.time()
                logger.debug("Starting stage: {}", stage.name)
                if on_stage is not None:
                    on_stage(stage, context)

                context = stage.run(context)

                duration = time.time() - stage_start
                logger.debug("Completed stage: {} in {:.2f}s", stage.name, duration)

        except Exception as e:
            logger.error(
                "Pipeline failed at stage {}: {}", stage.name if stage else "unknown", e
            )
            raise

        total_time = time.time() - start_time
        logger.debug("Pipeline completed in {:.2f}s", total_time)
        return context
