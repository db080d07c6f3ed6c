"""Sequential extraction and merge over user-defined text segments.

Each segment runs through two stages:
1. Extraction (external language model, outside the graph lock)
2. Merge into the accumulator (unanchored; segment 0 replaces an empty graph)

The next segment is not extracted until the previous one has merged. Progress
is reported after every successful merge, and a failure halts the run with the
accumulator left at its last successful state.
"""

from __future__ import annotations

import threading
from enum import Enum
from typing import Callable, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, Field

from graphloom.exceptions import SegmentProcessingError
from graphloom.extraction.base import GraphExtractor
from graphloom.merge.engine import GraphHandle
from graphloom.models.graph import Graph
from graphloom.models.results import MergeResult
from graphloom.pipeline.base import Pipeline, PipelineStage, SegmentContext, TextSegment
from graphloom.pipeline.stages import ExtractionStage, MergeStage
from graphloom.utils.config import Config
from graphloom.utils.logger import log_error, log_metric
from graphloom.utils.progress import SegmentProgressTracker


class SegmentState(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    MERGING = "merging"
    DONE = "done"
    FAILED = "failed"
    CANCELLED = "cancelled"


class SegmentProgress(BaseModel):
    """Checkpoint emitted after a segment has merged."""

    segment_index: int
    total_segments: int
    segment_name: str = ""
    batch_id: Optional[str] = None
    nodes_added: int = 0
    nodes_merged: int = 0
    edges_added: int = 0


class OrchestrationResult(BaseModel):
    """Final state of a segment run."""

    state: SegmentState
    graph: Graph
    total_segments: int
    progress: List[SegmentProgress] = Field(default_factory=list)
    failed_segment: Optional[int] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.state == SegmentState.DONE

    @property
    def segments_completed(self) -> int:
        return len(self.progress)

    @property
    def nodes_added(self) -> int:
        return sum(p.nodes_added for p in self.progress)

    @property
    def nodes_merged(self) -> int:
        return sum(p.nodes_merged for p in self.progress)

    @property
    def edges_added(self) -> int:
        return sum(p.edges_added for p in self.progress)


class SegmentOrchestrator:
    """State machine driving extraction + merge over ordered segments.

    States: IDLE -> EXTRACTING(i) -> MERGING(i) -> ... -> DONE, with FAILED and
    CANCELLED as the other terminal states. ``cancel()`` may be called from
    another thread; it takes effect before the next segment starts, never
    during a merge.
    """

    def __init__(
        self,
        extractor: GraphExtractor,
        handle: GraphHandle | None = None,
        config: Config | None = None,
        progress_callback: Callable[[SegmentProgress], None] | None = None,
    ) -> None:
        self.config = config or Config()
        self.handle = handle or GraphHandle(config=self.config)
        self.progress_callback = progress_callback
        self.pipeline = Pipeline([ExtractionStage(extractor), MergeStage()])

        self.state = SegmentState.IDLE
        self.current_index: Optional[int] = None
        self._cancel = threading.Event()

    def cancel(self) -> None:
        """Request cancellation before the next segment starts."""
        self._cancel.set()

    def run(
        self,
        segments: Sequence[TextSegment],
        *,
        raise_on_failure: bool = False,
    ) -> OrchestrationResult:
        """Process segments in order.

        Args:
            segments: Ordered text segments
            raise_on_failure: Raise SegmentProcessingError instead of returning
                a FAILED result

        Returns:
            OrchestrationResult with the accumulator and per-segment progress
        """
        self._cancel.clear()
        total = len(segments)
        tracker = SegmentProgressTracker(total, self.config.orchestration.heartbeat_seconds)
        progress: List[SegmentProgress] = []
        logger.info("Processing {} segments", total)

        for index, segment in enumerate(segments):
            if self._cancel.is_set():
                logger.info("Cancelled before segment {}/{}", index + 1, total)
                self._set_state(SegmentState.CANCELLED, index)
                return self._result(SegmentState.CANCELLED, total, progress)

            context = SegmentContext(
                segment_index=index,
                total_segments=total,
                segment=segment,
                handle=self.handle,
            )
            try:
                context = self.pipeline.run(context, on_stage=self._on_stage)
                if not context.skipped:
                    merge_result = self._merge_result_of(context)
            except Exception as exc:
                log_error(exc, context=f"segment {index}")
                self._set_state(SegmentState.FAILED, index)
                if raise_on_failure:
                    raise SegmentProcessingError(index, exc, self.handle.snapshot()) from exc
                return self._result(
                    SegmentState.FAILED, total, progress, failed_segment=index, error=str(exc)
                )

            if context.skipped:
                tracker.update()
                continue

            checkpoint = SegmentProgress(
                segment_index=index,
                total_segments=total,
                segment_name=segment.name,
                batch_id=merge_result.batch_id,
                nodes_added=merge_result.nodes_inserted,
                nodes_merged=merge_result.nodes_merged,
                edges_added=merge_result.edges_added,
            )
            progress.append(checkpoint)
            tracker.update(nodes_added=checkpoint.nodes_added, edges_added=checkpoint.edges_added)
            if self.progress_callback:
                self.progress_callback(checkpoint)

        self._set_state(SegmentState.DONE, None)
        result = self._result(SegmentState.DONE, total, progress)
        log_metric("segments.nodes_added", result.nodes_added, segments=total)
        log_metric("segments.edges_added", result.edges_added, segments=total)
        logger.success(
            "Segment run complete: {} segments, +{} nodes, {} merged, +{} edges",
            result.segments_completed,
            result.nodes_added,
            result.nodes_merged,
            result.edges_added,
        )
        return result

    @staticmethod
    def _merge_result_of(context: SegmentContext) -> MergeResult:
        if context.merge_result is None:
            raise ValueError(f"No merge result found for segment {context.segment_index}")
        return context.merge_result

    def _on_stage(self, stage: PipelineStage, context: SegmentContext) -> None:
        if isinstance(stage, MergeStage):
            self._set_state(SegmentState.MERGING, context.segment_index)
        else:
            self._set_state(SegmentState.EXTRACTING, context.segment_index)

    def _set_state(self, state: SegmentState, index: Optional[int]) -> None:
        self.state = state
        self.current_index = index

    def _result(
        self,
        state: SegmentState,
        total: int,
        progress: List[SegmentProgress],
        *,
        failed_segment: Optional[int] = None,
        error: Optional[str] = None,
    ) -> OrchestrationResult:
        return OrchestrationResult(
            state=state,
            graph=self.handle.snapshot(),
            total_segments=total,
            progress=progress,
            failed_segment=failed_segment,
            error=error,
        )
