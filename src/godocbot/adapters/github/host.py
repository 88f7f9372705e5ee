"""``RepositoryHost`` implementation backed by GitHub."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

from godocbot.config.github import get_github_config
from godocbot.domain.errors import HostUnavailableError, MalformedHostResponseError
from godocbot.domain.ports import HostPullRequest

from .client import GitHubAPIError, GitHubClient, GitHubSchemaError

if TYPE_CHECKING:
    from godocbot.domain.ports import RepositoryHost

    from .schema import GitHubPullRequest


def _default_client() -> GitHubClient:
    return GitHubClient(config=get_github_config())


def _translate(pull: GitHubPullRequest) -> HostPullRequest:
    return HostPullRequest(number=pull.number, head_commit=pull.head.sha)


@dataclass(slots=True)
class GitHubRepositoryHost:
    client: GitHubClient = field(default_factory=_default_client)

    def get_pull_request(self, organization: str, repository: str, number: int) -> HostPullRequest:
        try:
            pull = self.client.get_pull_request(organization, repository, number)
        except GitHubSchemaError as exc:
            raise MalformedHostResponseError(str(exc)) from exc
        except GitHubAPIError as exc:
            raise HostUnavailableError(str(exc), status_code=exc.status_code) from exc
        except httpx.HTTPError as exc:
            raise HostUnavailableError(f"GitHub request failed: {exc}") from exc
        return _translate(pull)

    def list_pull_requests(self, organization: str, repository: str) -> list[HostPullRequest]:
        try:
            pulls = self.client.list_pull_requests(organization, repository)
        except GitHubSchemaError as exc:
            raise MalformedHostResponseError(str(exc)) from exc
        except GitHubAPIError as exc:
            raise HostUnavailableError(str(exc), status_code=exc.status_code) from exc
        except httpx.HTTPError as exc:
            raise HostUnavailableError(f"GitHub request failed: {exc}") from exc
        return [_translate(pull) for pull in pulls]


if TYPE_CHECKING:
    _host_check: RepositoryHost = GitHubRepositoryHost()
