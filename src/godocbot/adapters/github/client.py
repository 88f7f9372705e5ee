"""HTTP client for the GitHub REST API."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import TypeAdapter, ValidationError

from godocbot.adapters.http_resilience import ResilientClient

from .schema import GitHubErrorResponse, GitHubPullRequest

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx

    from godocbot.config.github import GitHubConfig
    from godocbot.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

PULLS_PAGE_SIZE = 100
MAX_PULLS_PAGES = 20

_PULL_LIST = TypeAdapter(list[GitHubPullRequest])


class GitHubAPIError(RuntimeError):
    """Raised when the GitHub API answers with an error status."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class GitHubSchemaError(GitHubAPIError):
    """Raised when a GitHub payload does not match the expected shape."""


class GitHubClient:
    """Low-level HTTP client for the GitHub pulls endpoints."""

    def __init__(
        self,
        *,
        config: GitHubConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._resilience = config.resilience
        self._client_factory = client_factory or ResilientClient

    def get_pull_request(self, owner: str, repo: str, number: int) -> GitHubPullRequest:
        return asyncio.run(self._get_pull_request_async(owner, repo, number))

    def list_pull_requests(self, owner: str, repo: str, *, state: str = "open") -> list[GitHubPullRequest]:
        return asyncio.run(self._list_pull_requests_async(owner, repo, state=state))

    async def _get_pull_request_async(self, owner: str, repo: str, number: int) -> GitHubPullRequest:
        async with self._client_factory(self._resilience) as client:
            response = await client.get(self._url(f"/repos/{owner}/{repo}/pulls/{number}"))
            payload = self._payload(response)
        try:
            return GitHubPullRequest.model_validate(payload)
        except ValidationError as exc:
            raise GitHubSchemaError(f"Unexpected pull request payload: {exc}") from exc

    async def _list_pull_requests_async(
        self, owner: str, repo: str, *, state: str
    ) -> list[GitHubPullRequest]:
        pulls: list[GitHubPullRequest] = []
        url: str | None = self._url(f"/repos/{owner}/{repo}/pulls")
        params: dict[str, str | int] | None = {"state": state, "per_page": PULLS_PAGE_SIZE}
        pages = 0

        async with self._client_factory(self._resilience) as client:
            while url is not None and pages < MAX_PULLS_PAGES:
                response = await client.get(url, params=params)
                payload = self._payload(response)
                try:
                    pulls.extend(_PULL_LIST.validate_python(payload))
                except ValidationError as exc:
                    raise GitHubSchemaError(f"Unexpected pull request list payload: {exc}") from exc
                pages += 1
                # The next link already carries the query string.
                url = response.links.get("next", {}).get("url")
                params = None

        if url is not None:
            log.warning(
                "Stopped listing %s/%s pull requests after %s pages", owner, repo, MAX_PULLS_PAGES
            )
        return pulls

    def _url(self, path: str) -> str:
        if self._resilience.base_url is not None:
            return path
        return f"{self._config.api_url}{path}"

    @staticmethod
    def _payload(response: httpx.Response) -> object:
        if response.is_success:
            try:
                return response.json()
            except ValueError as exc:
                raise GitHubSchemaError("GitHub answered with a non-JSON body") from exc

        message = response.reason_phrase or "error"
        try:
            message = GitHubErrorResponse.model_validate(response.json()).message
        except (ValueError, ValidationError):
            pass
        log.error("GitHub API error %s for %s: %s", response.status_code, response.url, message)
        raise GitHubAPIError(
            f"GitHub API error {response.status_code}: {message}",
            status_code=response.status_code,
        )
