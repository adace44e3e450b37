from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Protocol

import requests
from github import Auth, Github
from github.GithubException import (
    BadCredentialsException,
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)
from github.Repository import Repository as GhRepository

from .errors import (
    ConfigurationError,
    NotFoundError,
    PreconditionFailedError,
    RemoteError,
    TransientRemoteError,
)
from .models import CodeHit, FileHandle, Repository

logger = logging.getLogger(__name__)

# Contents API answers 409 for a stale sha and 422 when creating a path that
# already exists (no sha supplied).
_FILE_WRITE_CONFLICT_STATUSES = (409, 422)


class RepositorySource(Protocol):
    """The remote operations the engine needs, read side and write side."""

    def list_repositories(
        self, org: str, sort: Optional[str] = None, direction: Optional[str] = None
    ) -> List[Repository]: ...

    def get_repository(self, org: str, name: str) -> Repository: ...

    def search_code(self, query: str) -> List[CodeHit]: ...

    def count_code(self, query: str) -> int: ...

    def fetch_file(
        self, org: str, repo: str, path: str, ref: Optional[str] = None
    ) -> FileHandle: ...

    def delete_branch(self, org: str, repo: str, branch: str) -> bool: ...

    def create_branch(self, org: str, repo: str, branch: str, from_branch: str) -> str: ...

    def create_file(
        self, org: str, repo: str, path: str, content: str, *, message: str, branch: str
    ) -> None: ...

    def update_file(
        self,
        org: str,
        repo: str,
        path: str,
        content: str,
        *,
        sha: str,
        message: str,
        branch: str,
    ) -> None: ...

    def create_pull_request(
        self, org: str, repo: str, *, title: str, body: str, head: str, base: str
    ) -> str: ...


def _describe(exc: GithubException) -> str:
    data = exc.data
    if isinstance(data, dict) and data.get("message"):
        return f"{exc.status} {data['message']}"
    return f"{exc.status} {data!r}"


def _is_secondary_rate_limit(exc: GithubException) -> bool:
    data = exc.data
    message = data.get("message", "") if isinstance(data, dict) else str(data)
    return exc.status in (403, 429) and "rate limit" in message.lower()


def _retry_after(exc: GithubException) -> Optional[int]:
    headers = exc.headers or {}
    raw = headers.get("retry-after") or headers.get("Retry-After")
    try:
        return int(raw) if raw else None
    except ValueError:
        return None


@contextmanager
def _translated(
    repository: Optional[str], *, conflict_statuses: tuple[int, ...] = ()
) -> Iterator[None]:
    """Map PyGithub/requests failures onto the landscaper error kinds."""
    try:
        yield
    except RateLimitExceededException as exc:
        raise TransientRemoteError(
            f"rate limited: {_describe(exc)}",
            repository=repository,
            retry_after=_retry_after(exc),
        ) from exc
    except BadCredentialsException as exc:
        raise ConfigurationError(f"GitHub rejected the token: {_describe(exc)}") from exc
    except UnknownObjectException as exc:
        raise NotFoundError(f"not found: {_describe(exc)}") from exc
    except GithubException as exc:
        if exc.status == 404:
            raise NotFoundError(f"not found: {_describe(exc)}") from exc
        if exc.status in conflict_statuses:
            raise PreconditionFailedError(
                f"write rejected: {_describe(exc)}", repository=repository
            ) from exc
        if exc.status >= 500 or _is_secondary_rate_limit(exc):
            raise TransientRemoteError(
                f"remote unavailable: {_describe(exc)}",
                repository=repository,
                retry_after=_retry_after(exc),
            ) from exc
        raise RemoteError(
            f"request failed: {_describe(exc)}", repository=repository, status=exc.status
        ) from exc
    except requests.exceptions.RequestException as exc:
        raise TransientRemoteError(
            f"connection failed: {exc}", repository=repository
        ) from exc


def to_repository(repo: Any) -> Repository:
    return Repository(
        name=repo.name,
        full_name=repo.full_name,
        default_branch=repo.default_branch,
        archived=bool(repo.archived),
        description=repo.description,
        html_url=repo.html_url,
    )


class GithubClient:
    """RepositorySource backed by PyGithub.

    PyGithub's own retry is disabled; failures surface to the caller.
    """

    def __init__(self, token: str, *, gh: Github | None = None) -> None:
        self._gh = gh or Github(auth=Auth.Token(token), retry=None, per_page=100)

    def _repo(self, org: str, repo: str) -> GhRepository:
        # lazy: no request until an attribute or endpoint is used
        return self._gh.get_repo(f"{org}/{repo}", lazy=True)

    def list_repositories(
        self, org: str, sort: Optional[str] = None, direction: Optional[str] = None
    ) -> List[Repository]:
        kwargs: Dict[str, str] = {"type": "all"}
        if sort:
            kwargs["sort"] = sort
        if direction:
            kwargs["direction"] = direction
        with _translated(None):
            organization = self._gh.get_organization(org)
            repos = [to_repository(r) for r in organization.get_repos(**kwargs)]
        logger.info("Listed %d repositories in %s", len(repos), org)
        return repos

    def get_repository(self, org: str, name: str) -> Repository:
        with _translated(name):
            return to_repository(self._gh.get_repo(f"{org}/{name}"))

    def search_code(self, query: str) -> List[CodeHit]:
        with _translated(None):
            hits = [
                CodeHit(repository=item.repository.name, path=item.path)
                for item in self._gh.search_code(query)
            ]
        logger.debug("Code search %r returned %d hits", query, len(hits))
        return hits

    def count_code(self, query: str) -> int:
        with _translated(None):
            return self._gh.search_code(query).totalCount

    def fetch_file(
        self, org: str, repo: str, path: str, ref: Optional[str] = None
    ) -> FileHandle:
        with _translated(repo):
            gh_repo = self._repo(org, repo)
            contents = gh_repo.get_contents(path, ref=ref) if ref else gh_repo.get_contents(path)
        if isinstance(contents, list):
            raise NotFoundError(f"{org}/{repo}/{path} is a directory")
        if contents.encoding != "base64":
            raise RemoteError(
                f"{path} has unsupported encoding {contents.encoding}", repository=repo
            )
        try:
            text = contents.decoded_content.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise RemoteError(
                f"{path} is not UTF-8 text", repository=repo
            ) from exc
        return FileHandle(path=contents.path, content=text, sha=contents.sha)

    def delete_branch(self, org: str, repo: str, branch: str) -> bool:
        gh_repo = self._repo(org, repo)
        try:
            with _translated(repo):
                ref = gh_repo.get_git_ref(f"heads/{branch}")
        except NotFoundError:
            return False
        with _translated(repo):
            ref.delete()
        return True

    def create_branch(self, org: str, repo: str, branch: str, from_branch: str) -> str:
        gh_repo = self._repo(org, repo)
        with _translated(repo):
            sha = gh_repo.get_branch(from_branch).commit.sha
            gh_repo.create_git_ref(ref=f"refs/heads/{branch}", sha=sha)
        return sha

    def create_file(
        self, org: str, repo: str, path: str, content: str, *, message: str, branch: str
    ) -> None:
        with _translated(repo, conflict_statuses=_FILE_WRITE_CONFLICT_STATUSES):
            self._repo(org, repo).create_file(path, message, content, branch=branch)

    def update_file(
        self,
        org: str,
        repo: str,
        path: str,
        content: str,
        *,
        sha: str,
        message: str,
        branch: str,
    ) -> None:
        with _translated(repo, conflict_statuses=_FILE_WRITE_CONFLICT_STATUSES):
            self._repo(org, repo).update_file(path, message, content, sha, branch=branch)

    def create_pull_request(
        self, org: str, repo: str, *, title: str, body: str, head: str, base: str
    ) -> str:
        with _translated(repo):
            pr = self._repo(org, repo).create_pull(
                title=title, body=body, head=head, base=base
            )
        return pr.html_url

    def close(self) -> None:
        self._gh.close()
