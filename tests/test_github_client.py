from __future__ import annotations

from types import SimpleNamespace

import pytest
import requests
from github.GithubException import (
    BadCredentialsException,
    GithubException,
    RateLimitExceededException,
    UnknownObjectException,
)

from landscaper.errors import (
    ConfigurationError,
    NotFoundError,
    PreconditionFailedError,
    RemoteError,
    TransientRemoteError,
)
from landscaper.github_client import GithubClient


def _raiser(exc: Exception):
    def _raise(*_args, **_kwargs):
        raise exc

    return _raise


class FakeGhRepo:
    def __init__(self) -> None:
        self.deleted_refs: list[str] = []
        self.created_refs: list[tuple[str, str]] = []
        self.contents = {
            "README.md": SimpleNamespace(
                path="README.md", sha="abc", encoding="base64", decoded_content=b"# hi\n"
            )
        }

    def get_contents(self, path, ref=None):
        try:
            return self.contents[path]
        except KeyError:
            raise UnknownObjectException(404, {"message": "Not Found"}, {}) from None

    def get_git_ref(self, ref):
        if ref != "heads/landscaper":
            raise UnknownObjectException(404, {"message": "Not Found"}, {})
        return SimpleNamespace(delete=lambda: self.deleted_refs.append(ref))

    def get_branch(self, name):
        return SimpleNamespace(commit=SimpleNamespace(sha="deadbeefcafe"))

    def create_git_ref(self, ref, sha):
        self.created_refs.append((ref, sha))


class _SearchResults(list):
    @property
    def totalCount(self) -> int:
        return len(self)


class FakeGithub:
    def __init__(self, repo: FakeGhRepo | None = None) -> None:
        self.repo = repo or FakeGhRepo()
        self.repo_calls: list[tuple[str, bool]] = []

    def get_repo(self, full_name, lazy=False):
        self.repo_calls.append((full_name, lazy))
        return self.repo

    def get_organization(self, org):
        repos = [
            SimpleNamespace(
                name="svc",
                full_name=f"{org}/svc",
                default_branch="main",
                archived=False,
                description=None,
                html_url=f"https://github.com/{org}/svc",
            )
        ]
        return SimpleNamespace(get_repos=lambda **kwargs: repos)

    def search_code(self, query):
        hit = SimpleNamespace(repository=SimpleNamespace(name="svc"), path="a.py")
        return _SearchResults([hit])


def test_fetch_file_decodes_content_and_keeps_sha() -> None:
    client = GithubClient("t", gh=FakeGithub())
    handle = client.fetch_file("org", "svc", "README.md")
    assert (handle.path, handle.content, handle.sha) == ("README.md", "# hi\n", "abc")


def test_fetch_missing_file_raises_not_found() -> None:
    client = GithubClient("t", gh=FakeGithub())
    with pytest.raises(NotFoundError):
        client.fetch_file("org", "svc", "catalog-info.yaml")


def test_list_repositories_maps_to_snapshots() -> None:
    client = GithubClient("t", gh=FakeGithub())
    [repo] = client.list_repositories("org", "updated", "desc")
    assert repo.full_name == "org/svc"
    assert repo.default_branch == "main"
    assert repo.archived is False


def test_search_code_returns_owning_repository_and_path() -> None:
    client = GithubClient("t", gh=FakeGithub())
    [hit] = client.search_code("org:org needle")
    assert (hit.repository, hit.path) == ("svc", "a.py")


def test_delete_branch_tolerates_missing_branch() -> None:
    repo = FakeGhRepo()
    client = GithubClient("t", gh=FakeGithub(repo))
    assert client.delete_branch("org", "svc", "other") is False
    assert client.delete_branch("org", "svc", "landscaper") is True
    assert repo.deleted_refs == ["heads/landscaper"]


def test_create_branch_points_at_default_branch_tip() -> None:
    repo = FakeGhRepo()
    client = GithubClient("t", gh=FakeGithub(repo))
    assert client.create_branch("org", "svc", "landscaper", "main") == "deadbeefcafe"
    assert repo.created_refs == [("refs/heads/landscaper", "deadbeefcafe")]


@pytest.mark.parametrize(
    "exc, expected",
    [
        (GithubException(409, {"message": "sha mismatch"}, {}), PreconditionFailedError),
        (GithubException(422, {"message": "sha wasn't supplied"}, {}), PreconditionFailedError),
        (GithubException(502, {"message": "Bad Gateway"}, {}), TransientRemoteError),
        (RateLimitExceededException(403, {"message": "API rate limit exceeded"}, {}), TransientRemoteError),
        (GithubException(403, {"message": "You have exceeded a secondary rate limit"}, {}), TransientRemoteError),
        (BadCredentialsException(401, {"message": "Bad credentials"}, {}), ConfigurationError),
        (GithubException(400, {"message": "nope"}, {}), RemoteError),
        (requests.exceptions.ConnectionError("reset"), TransientRemoteError),
    ],
)
def test_update_file_translates_remote_errors(exc, expected) -> None:
    repo = FakeGhRepo()
    repo.update_file = _raiser(exc)
    client = GithubClient("t", gh=FakeGithub(repo))
    with pytest.raises(expected):
        client.update_file("org", "svc", "README.md", "x", sha="abc", message="m", branch="b")


def test_pull_request_validation_error_is_not_a_precondition_failure() -> None:
    repo = FakeGhRepo()
    repo.create_pull = _raiser(GithubException(422, {"message": "A pull request already exists"}, {}))
    client = GithubClient("t", gh=FakeGithub(repo))
    with pytest.raises(RemoteError) as excinfo:
        client.create_pull_request("org", "svc", title="t", body="b", head="h", base="main")
    assert excinfo.value.status == 422
    assert excinfo.value.repository == "svc"


def test_transient_errors_are_retryable() -> None:
    repo = FakeGhRepo()
    repo.create_file = _raiser(GithubException(503, {"message": "unavailable"}, {"retry-after": "30"}))
    client = GithubClient("t", gh=FakeGithub(repo))
    with pytest.raises(TransientRemoteError) as excinfo:
        client.create_file("org", "svc", "a", "x", message="m", branch="b")
    assert excinfo.value.retryable is True
    assert excinfo.value.retry_after == 30


def test_count_code_uses_total_count() -> None:
    client = GithubClient("t", gh=FakeGithub())
    assert client.count_code("repo:org/svc needle") == 1


def test_file_reads_use_lazy_repository_handles() -> None:
    gh = FakeGithub()
    GithubClient("t", gh=gh).fetch_file("org", "svc", "README.md")
    assert gh.repo_calls == [("org/svc", True)]


def test_fetch_file_rejects_contents_without_base64_encoding() -> None:
    repo = FakeGhRepo()
    repo.contents["huge.json"] = SimpleNamespace(
        path="huge.json", sha="def", encoding="none", decoded_content=None
    )
    client = GithubClient("t", gh=FakeGithub(repo))
    with pytest.raises(RemoteError) as excinfo:
        client.fetch_file("org", "svc", "huge.json")
    assert excinfo.value.repository == "svc"
    assert "unsupported encoding none" in str(excinfo.value)
