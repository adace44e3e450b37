from __future__ import annotations

import asyncio

import pytest

from fakes import FakeRepositorySource, make_repo, make_settings
from landscaper.config import GlobalOptions
from landscaper.errors import (
    ConfigurationError,
    RemoteError,
    StrategyError,
    TransientRemoteError,
)
from landscaper.models import (
    ChangeSet,
    CodeHit,
    DryRun,
    PullRequestCreated,
    Skipped,
    UpdateFile,
)
from landscaper.strategies import AddBadgeStrategy, EnrichCatalogStrategy, FindReplaceStrategy
from landscaper.workflows.bulk_change.state import BulkChangeDeps, BulkChangeState
from landscaper.workflows.bulk_change.workflow import run_bulk_change_workflow


class RecordingStrategy:
    name = "recording"
    title = "chore: recorded"
    sort = "updated"
    direction = "desc"

    def __init__(self, errors=None, empty=()) -> None:
        self.seen: list[str] = []
        self.errors = errors or {}
        self.empty = set(empty)

    def compute_changes(self, ctx, repository):
        self.seen.append(repository.name)
        if repository.name in self.errors:
            raise self.errors[repository.name]
        if repository.name in self.empty:
            return ChangeSet()
        return ChangeSet.of(UpdateFile(path="f", content="new", sha="s"))


def _run(source, strategy, **option_kwargs) -> BulkChangeState:
    options = GlobalOptions(org="org", **option_kwargs)
    state = BulkChangeState(strategy=strategy, options=options, settings=make_settings())
    return asyncio.run(run_bulk_change_workflow(state, BulkChangeDeps(source=source)))


def test_archived_repositories_never_reach_the_strategy() -> None:
    source = FakeRepositorySource(
        [make_repo("a"), make_repo("b", archived=True), make_repo("c")]
    )
    strategy = RecordingStrategy()
    _run(source, strategy)
    assert strategy.seen == ["a", "c"]
    assert source.calls[0] == ("list_repositories", "org", "updated", "desc")


def test_skip_and_filter_select_the_expected_subsequence() -> None:
    source = FakeRepositorySource([make_repo(n) for n in ("r1", "x2", "r3", "r4", "r5")])
    strategy = RecordingStrategy()
    _run(source, strategy, repo_filter="^r", skip=1)
    assert strategy.seen == ["r3", "r4", "r5"]


def test_dry_run_reports_without_any_write_calls(capsys) -> None:
    source = FakeRepositorySource([make_repo("a"), make_repo("b")])
    state = _run(source, RecordingStrategy(empty={"b"}))

    assert state.outcomes == [DryRun(repository="a", paths=("f",)), Skipped(repository="b")]
    assert source.write_calls() == []
    assert "PR:" not in capsys.readouterr().out


def test_write_mode_prints_pull_requests_in_order(capsys) -> None:
    source = FakeRepositorySource([make_repo("a"), make_repo("b")])
    state = _run(source, RecordingStrategy(), write=True)

    assert state.outcomes == [
        PullRequestCreated(repository="a", url="https://github.com/org/a/pull/1"),
        PullRequestCreated(repository="b", url="https://github.com/org/b/pull/2"),
    ]
    out = capsys.readouterr().out.splitlines()
    assert out == ["PR: https://github.com/org/a/pull/1", "PR: https://github.com/org/b/pull/2"]


def test_repository_errors_are_logged_and_excluded(caplog) -> None:
    source = FakeRepositorySource([make_repo("a"), make_repo("b"), make_repo("c")])
    strategy = RecordingStrategy(
        errors={
            "a": StrategyError("cannot read", repository="a"),
            "b": TransientRemoteError("rate limited", repository="b"),
        }
    )
    state = _run(source, strategy, write=True)

    assert strategy.seen == ["a", "b", "c"]
    assert [o.repository for o in state.outcomes] == ["c"]
    assert state.failed == ["a", "b"]
    assert "a: cannot read" in caplog.text


def test_apply_failures_do_not_stop_the_run() -> None:
    source = FakeRepositorySource([make_repo("a"), make_repo("b")])
    source.fail_on("create_branch", TransientRemoteError("502", repository="a"))
    state = _run(source, RecordingStrategy(), write=True)
    assert state.failed == ["a", "b"]
    assert state.outcomes == []


def test_configuration_errors_abort_the_run() -> None:
    source = FakeRepositorySource([make_repo("a", default_branch=None), make_repo("b")])
    strategy = RecordingStrategy()
    with pytest.raises(ConfigurationError):
        _run(source, strategy)
    assert strategy.seen == ["a"]


def test_enrich_end_to_end_opens_one_pull_request() -> None:
    source = FakeRepositorySource([make_repo("svc", description="Billing service")])
    source.add_file(
        "svc",
        "catalog-info.yaml",
        "apiVersion: backstage.io/v1alpha1\nkind: Component\n"
        "metadata:\n  name: template\n  description: ''\n"
        "spec:\n  type: service\n  lifecycle: production\n  owner: payments\n",
    )
    state = _run(source, EnrichCatalogStrategy(), write=True)

    assert state.outcomes == [
        PullRequestCreated(repository="svc", url="https://github.com/org/svc/pull/1")
    ]
    titles = [c[2] for c in source.calls if c[0] == "create_pull_request"]
    assert titles == ["[no-ci] chore: Update catalog.info.yaml"]


def _find_replace_source() -> FakeRepositorySource:
    source = FakeRepositorySource(
        [make_repo("svc"), make_repo("legacy", archived=True), make_repo("tools")]
    )
    source.search_results["org:org old-host"] = [
        CodeHit("legacy", "a.yaml"),
        CodeHit("svc", "a.yaml"),
        CodeHit("tools", "b.yaml"),
    ]
    for repo, path in (("legacy", "a.yaml"), ("svc", "a.yaml"), ("tools", "b.yaml")):
        source.add_file(repo, path, "url: old-host\n")
    return source


def test_find_replace_discovers_from_search_and_drops_archived_hits() -> None:
    source = _find_replace_source()
    state = _run(source, FindReplaceStrategy(find="old-host", replace="new-host"))

    assert state.outcomes == [
        DryRun(repository="svc", paths=("a.yaml",)),
        DryRun(repository="tools", paths=("b.yaml",)),
    ]
    fetched = [c[2] for c in source.calls if c[0] == "fetch_file"]
    assert "legacy" not in fetched
    assert not any(c[0] == "list_repositories" for c in source.calls)


def test_find_replace_hits_go_through_name_filter_and_skip() -> None:
    source = _find_replace_source()
    state = _run(
        source,
        FindReplaceStrategy(find="old-host", replace="new-host"),
        repo_filter="^(svc|tools|legacy)$",
        skip=1,
    )
    assert state.outcomes == [DryRun(repository="tools", paths=("b.yaml",))]


def test_unreadable_file_encoding_fails_only_that_repository() -> None:
    source = FakeRepositorySource([make_repo("big"), make_repo("next")])
    source.fail_on(
        "fetch_file", RemoteError("README.md has unsupported encoding none", repository="big")
    )
    state = _run(source, AddBadgeStrategy())

    assert state.failed == ["big", "next"]
    assert state.outcomes == []
