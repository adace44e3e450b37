import logging

from pydantic_graph import Graph

from landscaper.logging_config import ensure_logging_configured
from landscaper.workflows.bulk_change.apply_changes_step.node import ApplyChanges
from landscaper.workflows.bulk_change.compute_changes_step.node import ComputeChanges
from landscaper.workflows.bulk_change.discover_repos_step.node import DiscoverRepos
from landscaper.workflows.bulk_change.next_repo_step.node import NextRepo
from landscaper.workflows.bulk_change.report_step.node import Report
from landscaper.workflows.bulk_change.state import BulkChangeDeps, BulkChangeState

logger = logging.getLogger(__name__)


def build_bulk_change_graph() -> Graph:
    return Graph(
        nodes=[DiscoverRepos, NextRepo, ComputeChanges, ApplyChanges, Report],
        state_type=BulkChangeState,
    )


async def run_bulk_change_workflow(
    state: BulkChangeState, deps: BulkChangeDeps
) -> BulkChangeState:
    ensure_logging_configured()
    graph = build_bulk_change_graph()
    result = await graph.run(DiscoverRepos(), state=state, deps=deps)
    return result.state if hasattr(result, "state") else result
