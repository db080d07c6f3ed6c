from graphloom.pipeline.stages.extraction import ExtractionStage
from graphloom.pipeline.stages.merge import MergeStage

__all__ = ["ExtractionStage", "MergeStage"]
