from __future__ import annotations

import logging
from dataclasses import dataclass

from pydantic_graph import BaseNode, End, GraphRunContext

from landscaper.errors import ConfigurationError, LandscaperError
from landscaper.models import ChangeSet, Repository
from landscaper.workflows.bulk_change.apply_changes_step.applier import MutationApplier

logger = logging.getLogger(__name__)


@dataclass
class ApplyChanges(BaseNode):
    repository: Repository
    changes: ChangeSet

    async def run(self, ctx: GraphRunContext) -> BaseNode | End:
        from landscaper.workflows.bulk_change.next_repo_step.node import NextRepo

        applier = MutationApplier(ctx.deps.source, ctx.state.options, ctx.state.settings)
        try:
            outcome = applier.apply(
                self.repository, self.changes, ctx.state.strategy.title
            )
        except ConfigurationError:
            raise
        except LandscaperError as exc:
            logger.error("[apply] creating PR for %s failed: %s", self.repository.name, exc)
            ctx.state.failed.append(self.repository.name)
            return NextRepo()

        ctx.state.outcomes.append(outcome)
        return NextRepo()
