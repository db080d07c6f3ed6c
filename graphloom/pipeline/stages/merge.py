from graphloom.pipeline.base import PipelineStage, SegmentContext


class MergeStage(PipelineStage):
    """Stage that folds the segment's partial graph into the accumulator.

    Segments are never anchored. The first segment replaces an empty
    accumulator outright.
    """

    def __init__(self):
        super().__init__("Merge")

    def run(self, context: SegmentContext) -> SegmentContext:
        if context.partial_graph is None:
            raise ValueError("No partial graph found in context")

        result = context.handle.apply(
            context.partial_graph,
            anchor_node_id=None,
            replace_if_empty=context.is_first,
        )
        context.merge_result = result
        context.update_stats("nodes_inserted", result.nodes_inserted)
        context.update_stats("nodes_merged", result.nodes_merged)
        context.update_stats("edges_added", result.edges_added)
        return context
