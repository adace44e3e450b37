from __future__ import annotations

import logging
from typing import List

from landscaper.models import Repository
from landscaper.strategies import ChangeStrategy, StrategyContext

from .repo_filter import filter_repositories

logger = logging.getLogger(__name__)


def discover_candidates(strategy: ChangeStrategy, ctx: StrategyContext) -> List[Repository]:
    discover = getattr(strategy, "discover", None)
    if callable(discover):
        return list(discover(ctx))
    return ctx.source.list_repositories(ctx.options.org, strategy.sort, strategy.direction)


def resolve_repositories(strategy: ChangeStrategy, ctx: StrategyContext) -> List[Repository]:
    candidates = discover_candidates(strategy, ctx)
    repos = filter_repositories(candidates, ctx.options)
    logger.info(
        "[discover] strategy=%s candidates=%d selected=%d",
        strategy.name,
        len(candidates),
        len(repos),
    )
    return repos
