from __future__ import annotations

from pydantic_graph import BaseNode, End, GraphRunContext

from landscaper.workflows.bulk_change.discover_repos_step.repo_discovery import (
    resolve_repositories,
)
from landscaper.workflows.bulk_change.state import strategy_context


class DiscoverRepos(BaseNode):
    async def run(self, ctx: GraphRunContext) -> BaseNode | End:
        ctx.state.repos = resolve_repositories(
            ctx.state.strategy, strategy_context(ctx.state, ctx.deps)
        )
        from landscaper.workflows.bulk_change.next_repo_step.node import NextRepo

        return NextRepo()
