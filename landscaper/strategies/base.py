from __future__ import annotations

import difflib
import logging
from dataclasses import dataclass
from typing import List, Optional, Protocol, runtime_checkable

from landscaper.config import GlobalOptions, Settings
from landscaper.errors import (
    ConfigurationError,
    LandscaperError,
    NotFoundError,
    StrategyError,
    TransientRemoteError,
)
from landscaper.github_client import RepositorySource
from landscaper.models import ChangeSet, FileHandle, Repository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StrategyContext:
    source: RepositorySource
    options: GlobalOptions
    settings: Settings


@runtime_checkable
class ChangeStrategy(Protocol):
    """Computes the file changes one command wants in one repository.

    `sort`/`direction` pick the enumeration order of the organization listing.
    Strategies that find their candidates some other way (e.g. code search)
    also provide `discover(ctx) -> list[Repository]`.
    """

    name: str
    sort: Optional[str]
    direction: Optional[str]

    @property
    def title(self) -> str: ...

    def compute_changes(self, ctx: StrategyContext, repository: Repository) -> ChangeSet: ...


def fetch_optional(
    ctx: StrategyContext, repository: Repository, path: str
) -> Optional[FileHandle]:
    """Read `path` from the default branch; None when it does not exist."""
    try:
        return ctx.source.fetch_file(ctx.options.org, repository.name, path)
    except NotFoundError:
        return None
    except (TransientRemoteError, ConfigurationError):
        raise
    except LandscaperError as exc:
        raise StrategyError(f"reading {path}: {exc}", repository=repository.name) from exc


def search_count(ctx: StrategyContext, repository: Repository, needle: str) -> int:
    query = f"repo:{ctx.options.org}/{repository.name} {needle}"
    try:
        return ctx.source.count_code(query)
    except (TransientRemoteError, ConfigurationError):
        raise
    except LandscaperError as exc:
        raise StrategyError(f"searching {needle!r}: {exc}", repository=repository.name) from exc


def render_diff(label: str, before: str, after: str) -> str:
    lines: List[str] = list(
        difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{label}",
            tofile=f"b/{label}",
            n=2,
        )
    )
    return "".join(line if line.endswith("\n") else line + "\n" for line in lines)


def show_diff(repository: Repository, path: str, before: str, after: str) -> None:
    print(f"#{repository.name}:\n----\n{render_diff(path, before, after)}")
