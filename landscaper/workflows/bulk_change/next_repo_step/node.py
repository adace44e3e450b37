from __future__ import annotations

from pydantic_graph import BaseNode, End, GraphRunContext


class NextRepo(BaseNode):
    async def run(self, ctx: GraphRunContext) -> BaseNode | End:
        if not ctx.state.repos:
            from landscaper.workflows.bulk_change.report_step.node import Report

            return Report()

        repository = ctx.state.repos.pop(0)
        from landscaper.workflows.bulk_change.compute_changes_step.node import (
            ComputeChanges,
        )

        return ComputeChanges(repository=repository)
