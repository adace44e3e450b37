from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from landscaper.errors import ConfigurationError, LandscaperError
from landscaper.models import Repository, Skipped
from landscaper.workflows.bulk_change.state import strategy_context

logger = logging.getLogger(__name__)


@dataclass
class ComputeChanges(BaseNode):
    repository: Repository

    async def run(self, ctx: GraphRunContext) -> BaseNode | End:
        from landscaper.workflows.bulk_change.next_repo_step.node import NextRepo

        name = self.repository.name
        logger.info("[compute] looking at %s", name)
        try:
            changes = ctx.state.strategy.compute_changes(
                strategy_context(ctx.state, ctx.deps), self.repository
            )
        except ConfigurationError:
            raise
        except LandscaperError as exc:
            logger.error("[compute] %s failed, skipping: %s", name, exc)
            ctx.state.failed.append(name)
            return NextRepo()

        if not changes:
            logger.info("[compute] no changes for %s", name)
            ctx.state.outcomes.append(Skipped(repository=name))
            return NextRepo()

        from landscaper.workflows.bulk_change.apply_changes_step.node import ApplyChanges

        return ApplyChanges(repository=self.repository, changes=changes)
