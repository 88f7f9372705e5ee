from __future__ import annotations

import httpx
import pytest

from godocbot.adapters.github import GitHubAPIError, GitHubClient, GitHubSchemaError
from godocbot.config import GitHubConfig, ResilienceConfig
from tests.helpers.http_mocks import make_client_factory

API = "https://api.github.com"


def _config(token: str | None = None) -> GitHubConfig:
    headers = {"Accept": "application/vnd.github+json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return GitHubConfig(
        api_url=API,
        token=token,
        resilience=ResilienceConfig(
            name="github-test", base_url=API, cache=None, default_headers=headers
        ),
    )


def _pull(number: int, sha: str) -> dict[str, object]:
    return {
        "number": number,
        "state": "open",
        "html_url": f"https://github.com/acme/widgets/pull/{number}",
        "head": {"sha": sha, "ref": "feature", "label": "acme:feature"},
        "user": {"login": "octocat"},
    }


def test_get_pull_request() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=_pull(42, "deadbeef"))

    client = GitHubClient(config=_config("secret"), client_factory=make_client_factory(handler))

    pull = client.get_pull_request("acme", "widgets", 42)

    assert pull.number == 42
    assert pull.head.sha == "deadbeef"
    assert seen[0].url == httpx.URL(f"{API}/repos/acme/widgets/pulls/42")
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_list_pull_requests_follows_next_links() -> None:
    seen: list[httpx.URL] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request.url)
        if request.url.params.get("page") == "2":
            return httpx.Response(200, json=[_pull(3, "c3")])
        next_url = f"{API}/repos/acme/widgets/pulls?state=open&per_page=100&page=2"
        return httpx.Response(
            200,
            json=[_pull(1, "c1"), _pull(2, "c2")],
            headers={"Link": f'<{next_url}>; rel="next", <{next_url}>; rel="last"'},
        )

    client = GitHubClient(config=_config(), client_factory=make_client_factory(handler))

    pulls = client.list_pull_requests("acme", "widgets")

    assert [(p.number, p.head.sha) for p in pulls] == [(1, "c1"), (2, "c2"), (3, "c3")]
    assert len(seen) == 2
    assert seen[0].params["state"] == "open"
    assert seen[0].params["per_page"] == "100"
    assert seen[1].params["page"] == "2"


def test_error_status_raises_api_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "Not Found"})

    client = GitHubClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(GitHubAPIError) as excinfo:
        client.get_pull_request("acme", "widgets", 404)

    assert excinfo.value.status_code == 404
    assert "Not Found" in str(excinfo.value)


def test_unexpected_payload_raises_schema_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"number": 1})

    client = GitHubClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(GitHubSchemaError):
        client.get_pull_request("acme", "widgets", 1)


def test_non_json_body_raises_schema_error() -> None:
    def handler(_: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>maintenance</html>")

    client = GitHubClient(config=_config(), client_factory=make_client_factory(handler))

    with pytest.raises(GitHubSchemaError):
        client.list_pull_requests("acme", "widgets")
