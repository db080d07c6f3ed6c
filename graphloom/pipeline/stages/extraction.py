from loguru import logger

from graphloom.exceptions import ExtractionFailedError
from graphloom.extraction.base import GraphExtractor
from graphloom.pipeline.base import PipelineStage, SegmentContext


class ExtractionStage(PipelineStage):
    """Stage that asks the extractor for a segment's partial graph.

    Runs without holding the graph lock; the accumulator is not read here.
    """

    def __init__(self, extractor: GraphExtractor):
        super().__init__("Extraction")
        self.extractor = extractor

    def run(self, context: SegmentContext) -> SegmentContext:
        segment = context.segment
        if not segment.text.strip():
            context.skipped = True
            context.skip_reason = f"Segment {context.segment_index} has no text"
            return context

        try:
            partial = self.extractor.extract(segment.text, segment.options)
        except ExtractionFailedError as exc:
            if exc.segment_index is None:
                exc.segment_index = context.segment_index
            raise
        except Exception as exc:
            raise ExtractionFailedError(
                f"Extraction failed for segment {context.segment_index}: {exc}",
                segment_index=context.segment_index,
            ) from exc

        if partial is None:
            raise ExtractionFailedError(
                f"Extractor returned no graph for segment {context.segment_index}",
                segment_index=context.segment_index,
            )

        logger.debug(
            "Segment {} extracted {} nodes, {} edges",
            context.segment_index,
            len(partial.nodes),
            len(partial.edges),
        )
        context.partial_graph = partial
        context.update_stats("nodes_extracted", len(partial.nodes))
        context.update_stats("edges_extracted", len(partial.edges))
        return context
