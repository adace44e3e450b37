"""Branch, commit and pull request lifecycle for one repository.

Stages run strictly in order:

    Idle -> BranchReset -> BranchCreated -> FilesWritten -> PullRequestOpened
    Idle -> DryRunReported

Nothing is rolled back on failure; a half-written branch stays for
inspection and is deleted by the next run's BranchReset.
"""

from __future__ import annotations

import logging
from enum import Enum

from landscaper.config import GlobalOptions, Settings
from landscaper.errors import (
    ApplyError,
    ConfigurationError,
    LandscaperError,
    PreconditionFailedError,
    TransientRemoteError,
)
from landscaper.github_client import RepositorySource
from landscaper.models import (
    ChangeSet,
    CreateFile,
    DryRun,
    Outcome,
    PullRequestCreated,
    Repository,
    Skipped,
    UpdateFile,
)

logger = logging.getLogger(__name__)


class ApplyStage(str, Enum):
    IDLE = "idle"
    DRY_RUN_REPORTED = "dry_run_reported"
    BRANCH_RESET = "branch_reset"
    BRANCH_CREATED = "branch_created"
    FILES_WRITTEN = "files_written"
    PULL_REQUEST_OPENED = "pull_request_opened"


def _commit_message(change: CreateFile | UpdateFile) -> str:
    if change.message:
        return change.message
    verb = "Create" if isinstance(change, CreateFile) else "Update"
    return f"chore: {verb} {change.path}"


class MutationApplier:
    def __init__(
        self, source: RepositorySource, options: GlobalOptions, settings: Settings
    ) -> None:
        self.source = source
        self.options = options
        self.settings = settings

    def apply(self, repository: Repository, changes: ChangeSet, title: str) -> Outcome:
        if not changes:
            return Skipped(repository=repository.name)

        org = self.options.org
        if not repository.default_branch:
            raise ConfigurationError(f"No default branch for {org}/{repository.name}")

        if not self.options.write:
            logger.info(
                "[apply] dry run for %s/%s: %d change(s) to %s",
                org,
                repository.name,
                len(changes),
                ", ".join(changes.paths()),
            )
            return DryRun(repository=repository.name, paths=tuple(changes.paths()))

        stage = ApplyStage.IDLE
        try:
            stage = self._reset_branch(repository)
            stage = self._create_branch(repository)
            stage = self._write_files(repository, changes)
            url = self._open_pull_request(repository, title)
        except (ConfigurationError, PreconditionFailedError, TransientRemoteError):
            raise
        except LandscaperError as exc:
            raise ApplyError(
                f"failed after stage {stage.value}: {exc}", repository=repository.name
            ) from exc

        logger.info("[apply] %s -> %s", repository.name, ApplyStage.PULL_REQUEST_OPENED.value)
        return PullRequestCreated(repository=repository.name, url=url)

    def _reset_branch(self, repository: Repository) -> ApplyStage:
        branch = self.options.branch
        deleted = self.source.delete_branch(self.options.org, repository.name, branch)
        if deleted:
            logger.info("[apply] deleted stale branch %s in %s", branch, repository.name)
        return ApplyStage.BRANCH_RESET

    def _create_branch(self, repository: Repository) -> ApplyStage:
        sha = self.source.create_branch(
            self.options.org,
            repository.name,
            self.options.branch,
            repository.default_branch or "",
        )
        logger.info(
            "[apply] created branch %s in %s from %s@%s",
            self.options.branch,
            repository.name,
            repository.default_branch,
            sha[:8],
        )
        return ApplyStage.BRANCH_CREATED

    def _write_files(self, repository: Repository, changes: ChangeSet) -> ApplyStage:
        org = self.options.org
        branch = self.options.branch
        for change in changes:
            message = _commit_message(change)
            if isinstance(change, CreateFile):
                self.source.create_file(
                    org, repository.name, change.path, change.content,
                    message=message, branch=branch,
                )
            else:
                self.source.update_file(
                    org, repository.name, change.path, change.content,
                    sha=change.sha, message=message, branch=branch,
                )
            logger.info("[apply] %s %s:%s", message, repository.name, change.path)
        return ApplyStage.FILES_WRITTEN

    def _open_pull_request(self, repository: Repository, title: str) -> str:
        return self.source.create_pull_request(
            self.options.org,
            repository.name,
            title=title,
            body=self.settings.pr_body,
            head=self.options.branch,
            base=repository.default_branch or "",
        )
