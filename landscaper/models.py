from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Union


@dataclass(frozen=True)
class Repository:
    name: str
    full_name: str
    default_branch: Optional[str] = None
    archived: bool = False
    description: Optional[str] = None
    html_url: Optional[str] = None


@dataclass(frozen=True)
class CodeHit:
    repository: str
    path: str


@dataclass(frozen=True)
class FileHandle:
    """A file read from a repository's default branch.

    `sha` is the blob revision the file was read at; updates must send it back
    unchanged so the remote can reject writes based on stale content.
    """

    path: str
    content: str
    sha: str


@dataclass(frozen=True)
class CreateFile:
    path: str
    content: str
    message: Optional[str] = None


@dataclass(frozen=True)
class UpdateFile:
    path: str
    content: str
    sha: str
    message: Optional[str] = None


Change = Union[CreateFile, UpdateFile]


@dataclass
class ChangeSet:
    """Ordered file operations for one repository. Empty means nothing to do."""

    changes: List[Change] = field(default_factory=list)

    @classmethod
    def of(cls, change: Change) -> ChangeSet:
        return cls(changes=[change])

    def add(self, change: Change) -> None:
        self.changes.append(change)

    def paths(self) -> List[str]:
        return [c.path for c in self.changes]

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)

    def __bool__(self) -> bool:
        return bool(self.changes)


@dataclass(frozen=True)
class PullRequestCreated:
    repository: str
    url: str


@dataclass(frozen=True)
class Skipped:
    repository: str
    reason: str = "no changes"


@dataclass(frozen=True)
class DryRun:
    repository: str
    paths: tuple[str, ...] = ()


Outcome = Union[PullRequestCreated, Skipped, DryRun]
