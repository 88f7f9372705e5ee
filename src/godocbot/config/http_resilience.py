"""Retry, rate-limit, cache and TLS settings for the HTTP adapters.

GitHub and the Kubernetes API server are both reached through
``adapters.http_resilience.ResilientClient``; each adapter config module builds
one ``ResilienceConfig`` from its environment.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Final, Literal

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

# POST is left out: a retried create answers AlreadyExists for its own first attempt.
RETRYABLE_METHODS: Final = frozenset({"DELETE", "GET", "HEAD", "OPTIONS", "PUT"})
RETRYABLE_STATUSES: Final = frozenset({429, 500, 502, 503, 504})
RETRYABLE_EXCEPTIONS: Final[tuple[type[httpx.HTTPError], ...]] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    total: int = 4
    backoff_factor: float = 0.5
    max_backoff_wait: float = 60.0
    respect_retry_after_header: bool = True
    allowed_methods: frozenset[str] = RETRYABLE_METHODS
    status_forcelist: frozenset[int] = RETRYABLE_STATUSES
    backoff_jitter: float = 1.0


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float = 1.0

    def __post_init__(self) -> None:
        if self.max_calls < 1 or self.per_seconds <= 0:
            raise ValueError(f"Invalid rate limit: {self.max_calls} per {self.per_seconds}s")


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """HTTP cache honouring the server's ``Cache-Control`` and ``ETag`` headers."""

    backend: Literal["sqlite", "memory"] = "memory"
    sqlite_path: str | None = None
    default_ttl_seconds: float | None = None

    def __post_init__(self) -> None:
        if self.backend == "sqlite" and not self.sqlite_path:
            raise ValueError("The sqlite cache backend needs a sqlite_path")

    @property
    def database_path(self) -> str:
        return self.sqlite_path if self.backend == "sqlite" and self.sqlite_path else ":memory:"


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    base_url: str | None = None
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] | None = None
    # ``True``/``False`` or the path of a CA bundle to trust.
    verify: bool | str = True
