"""GitHub configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_float, optional_env
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig

GITHUB_API_URL = "https://api.github.com"
GITHUB_TIMEOUT_SECONDS = 15.0
GITHUB_API_VERSION = "2022-11-28"


@dataclass(frozen=True)
class GitHubConfig:
    """Holds GitHub REST API configuration values."""

    api_url: str
    token: str | None
    resilience: ResilienceConfig


def _github_headers(token: str | None) -> dict[str, str]:
    headers = {
        "Accept": "application/vnd.github+json",
        "User-Agent": "godocbot",
        "X-GitHub-Api-Version": GITHUB_API_VERSION,
    }
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def _cache_config() -> CacheConfig:
    cache_path = optional_env("GITHUB_HTTP_CACHE_PATH")
    if cache_path is None:
        return CacheConfig(backend="memory")
    return CacheConfig(backend="sqlite", sqlite_path=cache_path)


def get_github_config(*, resilience: ResilienceConfig | None = None) -> GitHubConfig:
    """Build the GitHub configuration; every variable is optional.

    Anonymous access works for public repositories but is limited to 60
    requests per hour, so ``GITHUB_TOKEN`` is recommended.
    """

    api_url = (optional_env("GITHUB_API_URL") or GITHUB_API_URL).rstrip("/")
    token = optional_env("GITHUB_TOKEN")
    return GitHubConfig(
        api_url=api_url,
        token=token,
        resilience=resilience
        or ResilienceConfig(
            name="github",
            base_url=api_url,
            timeout_seconds=env_float("GITHUB_TIMEOUT_SECONDS", GITHUB_TIMEOUT_SECONDS),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=_cache_config(),
            default_headers=_github_headers(token),
        ),
    )
