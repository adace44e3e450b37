from __future__ import annotations

import logging
import re
from typing import Iterable, List, Optional, Pattern

from landscaper.config import GlobalOptions
from landscaper.errors import ConfigurationError
from landscaper.models import Repository

logger = logging.getLogger(__name__)


def compile_name_filter(pattern: Optional[str]) -> Optional[Pattern[str]]:
    if not pattern:
        return None
    try:
        return re.compile(pattern)
    except re.error as exc:
        raise ConfigurationError(f"Invalid --repo pattern {pattern!r}: {exc}") from exc


def exclusion_reason(repo: Repository, name_filter: Optional[Pattern[str]]) -> Optional[str]:
    if repo.archived:
        return "archived"
    if name_filter is not None and not name_filter.search(repo.name):
        return "does not match filter"
    return None


def filter_repositories(repos: Iterable[Repository], options: GlobalOptions) -> List[Repository]:
    """
    Drop archived and non-matching repositories, then skip the first
    `options.skip` survivors. Enumeration order is preserved.
    """
    if options.skip < 0:
        raise ConfigurationError(f"--skip must not be negative: {options.skip}")
    name_filter = compile_name_filter(options.repo_filter)

    matched: List[Repository] = []
    for repo in repos:
        reason = exclusion_reason(repo, name_filter)
        if reason:
            logger.info("Skipping %s/%s: %s", options.org, repo.name, reason)
            continue
        matched.append(repo)

    if options.skip:
        for repo in matched[: options.skip]:
            logger.info("Skipping %s/%s: within first %d", options.org, repo.name, options.skip)
    return matched[options.skip :]
