"""Segment processing pipeline."""

from graphloom.pipeline.base import Pipeline, PipelineStage, SegmentContext, TextSegment
from graphloom.pipeline.segment_orchestrator import (
    OrchestrationResult,
    SegmentOrchestrator,
    SegmentProgress,
    SegmentState,
)

__all__ = [
    "OrchestrationResult",
    "Pipeline",
    "PipelineStage",
    "SegmentContext",
    "SegmentOrchestrator",
    "SegmentProgress",
    "SegmentState",
    "TextSegment",
]
