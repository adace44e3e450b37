from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from landscaper.config import GlobalOptions, Settings
from landscaper.github_client import RepositorySource
from landscaper.models import Outcome, Repository
from landscaper.strategies import ChangeStrategy, StrategyContext


@dataclass
class BulkChangeState:
    """
    Bulk-change workflow state.

    One pass over an organization:
    - discover candidate repositories and filter them
    - for each repository, compute a change set with the strategy
    - apply non-empty change sets (branch, commits, pull request)
    - report the pull requests that were opened
    """

    strategy: ChangeStrategy
    options: GlobalOptions
    settings: Settings

    # Filtered repositories still to process, in enumeration order.
    repos: List[Repository] = field(default_factory=list)

    outcomes: List[Outcome] = field(default_factory=list)
    # Names of repositories whose pipeline raised; excluded from outcomes.
    failed: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class BulkChangeDeps:
    source: RepositorySource


def strategy_context(state: BulkChangeState, deps: BulkChangeDeps) -> StrategyContext:
    return StrategyContext(source=deps.source, options=state.options, settings=state.settings)
