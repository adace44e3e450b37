"""Landscaper exception hierarchy.

Repository-scoped failures derive from RepositoryError so the workflow can
log them and move on to the next repository. ConfigurationError aborts the
whole run.
"""

from __future__ import annotations


class LandscaperError(Exception):
    """Base exception for all landscaper errors."""

    def __init__(self, message: str = "", *, retryable: bool = False) -> None:
        super().__init__(message)
        self.retryable = retryable


class NotFoundError(LandscaperError):
    """A file, branch or repository does not exist on the remote."""


class ParseError(LandscaperError):
    """A catalog or deployment-spec document could not be parsed."""


class ConfigurationError(LandscaperError):
    """Invalid or missing configuration; fatal for the whole run."""


class RepositoryError(LandscaperError):
    """A failure scoped to a single repository."""

    def __init__(
        self,
        message: str = "",
        *,
        repository: str | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message, retryable=retryable)
        self.repository = repository

    def __str__(self) -> str:
        message = super().__str__()
        if self.repository:
            return f"{self.repository}: {message}"
        return message


class PreconditionFailedError(RepositoryError):
    """The remote revision no longer matches the sha an update was based on."""


class TransientRemoteError(RepositoryError):
    """Rate limiting, server errors or connection failures."""

    def __init__(
        self,
        message: str = "",
        *,
        repository: str | None = None,
        retry_after: int | float | None = None,
    ) -> None:
        super().__init__(message, repository=repository, retryable=True)
        self.retry_after = retry_after


class StrategyError(RepositoryError):
    """A change strategy failed to read what it needed."""


class ApplyError(RepositoryError):
    """A branch, commit or pull request call failed."""


class RemoteError(RepositoryError):
    """Any other non-successful response from the remote API."""

    def __init__(
        self,
        message: str = "",
        *,
        repository: str | None = None,
        status: int | None = None,
    ) -> None:
        super().__init__(message, repository=repository)
        self.status = status
