"""GitHub adapter package."""

from __future__ import annotations

from .client import GitHubAPIError, GitHubClient, GitHubSchemaError
from .host import GitHubRepositoryHost
from .schema import GitHubCommitRef, GitHubPullRequest

__all__ = [
    "GitHubAPIError",
    "GitHubClient",
    "GitHubCommitRef",
    "GitHubPullRequest",
    "GitHubRepositoryHost",
    "GitHubSchemaError",
]
