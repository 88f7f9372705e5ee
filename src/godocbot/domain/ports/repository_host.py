"""Port for the source-control host that owns the pull requests."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True, slots=True)
class HostPullRequest:
    """The host's view of a pull request: its number and current head commit."""

    number: int
    head_commit: str


@runtime_checkable
class RepositoryHost(Protocol):
    """Read-only access to pull request metadata.

    Implementations raise ``HostUnavailableError`` for transport and HTTP
    failures and ``MalformedHostResponseError`` for payloads they cannot parse.
    """

    def get_pull_request(self, organization: str, repository: str, number: int) -> HostPullRequest: ...

    def list_pull_requests(self, organization: str, repository: str) -> list[HostPullRequest]:
        """Return the open pull requests of ``organization/repository``."""
        ...


__all__ = ["HostPullRequest", "RepositoryHost"]
