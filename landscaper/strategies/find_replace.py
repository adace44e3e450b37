from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import ClassVar, Dict, List, Optional

from landscaper.errors import NotFoundError, RepositoryError
from landscaper.models import ChangeSet, CodeHit, Repository, UpdateFile

from .base import StrategyContext, fetch_optional, show_diff

logger = logging.getLogger(__name__)


def group_hits_by_repository(hits: List[CodeHit]) -> Dict[str, List[CodeHit]]:
    """Group code-search hits by owning repository, keeping first-seen order."""
    grouped: Dict[str, List[CodeHit]] = {}
    for hit in hits:
        files = grouped.setdefault(hit.repository, [])
        if all(f.path != hit.path for f in files):
            files.append(hit)
    return grouped


@dataclass
class FindReplaceStrategy:
    find: str
    replace: str
    message: Optional[str] = None

    name: ClassVar[str] = "find-replace"
    sort: ClassVar[Optional[str]] = None
    direction: ClassVar[Optional[str]] = None

    _hits: Dict[str, List[CodeHit]] = field(default_factory=dict, init=False, repr=False)

    @property
    def title(self) -> str:
        return f"[no-ci] chore: Replace `{self.find}` with `{self.replace}`"

    def discover(self, ctx: StrategyContext) -> List[Repository]:
        org = ctx.options.org
        self._hits = group_hits_by_repository(
            ctx.source.search_code(f"org:{org} {self.find}")
        )
        repos: List[Repository] = []
        for name, files in self._hits.items():
            logger.info("Found %d references in %s/%s", len(files), org, name)
            try:
                repos.append(ctx.source.get_repository(org, name))
            except (NotFoundError, RepositoryError) as exc:
                logger.warning("Could not fetch repository %s/%s: %s", org, name, exc)
        return repos

    def _hits_for(self, ctx: StrategyContext, repository: Repository) -> List[CodeHit]:
        if repository.name in self._hits:
            return self._hits[repository.name]
        query = f"repo:{ctx.options.org}/{repository.name} {self.find}"
        hits = group_hits_by_repository(ctx.source.search_code(query))
        return hits.get(repository.name, [])

    def compute_changes(self, ctx: StrategyContext, repository: Repository) -> ChangeSet:
        org = ctx.options.org
        changes = ChangeSet()
        for hit in self._hits_for(ctx, repository):
            original = fetch_optional(ctx, repository, hit.path)
            if original is None:
                logger.info("%s/%s/%s no longer exists, continuing", org, repository.name, hit.path)
                continue

            replaced = original.content.replace(self.find, self.replace)
            if replaced == original.content:
                logger.info(
                    "No content was changed in %s/%s/%s, continuing",
                    org,
                    repository.name,
                    hit.path,
                )
                continue

            show_diff(repository, original.path, original.content, replaced)
            changes.add(
                UpdateFile(
                    path=original.path,
                    content=replaced,
                    sha=original.sha,
                    message=self.message,
                )
            )
        return changes
