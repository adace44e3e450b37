from __future__ import annotations

import logging
from typing import List

from pydantic_graph import BaseNode, End, GraphRunContext

from landscaper.models import DryRun, Outcome, PullRequestCreated, Skipped

logger = logging.getLogger(__name__)


def pull_request_urls(outcomes: List[Outcome]) -> List[str]:
    return [o.url for o in outcomes if isinstance(o, PullRequestCreated)]


class Report(BaseNode):
    async def run(self, ctx: GraphRunContext) -> BaseNode | End:
        outcomes = ctx.state.outcomes
        logger.info(
            "[report] created=%d dry_run=%d skipped=%d failed=%d",
            sum(isinstance(o, PullRequestCreated) for o in outcomes),
            sum(isinstance(o, DryRun) for o in outcomes),
            sum(isinstance(o, Skipped) for o in outcomes),
            len(ctx.state.failed),
        )
        if ctx.state.failed:
            logger.warning("[report] failed repositories: %s", ", ".join(ctx.state.failed))
        for url in pull_request_urls(outcomes):
            print(f"PR: {url}")
        return End(list(outcomes))
