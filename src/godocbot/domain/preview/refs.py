"""Structured references to pull requests.

An example pull request URL looks like
``https://github.com/kubernetes-sigs/controller-runtime/pull/15``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from urllib.parse import urlsplit

from godocbot.domain.errors import MalformedReferenceError

_PULL_SEGMENT = "pull"
_NUMBER_PATTERN = re.compile(r"[0-9]+")


@dataclass(frozen=True, slots=True)
class PullRequestRef:
    host: str
    organization: str
    repository: str
    number: int
    commit_id: str = ""

    @property
    def subdomain(self) -> str:
        return f"{self.organization}-{self.repository}-pr-{self.number}"

    @property
    def repo_key(self) -> tuple[str, str]:
        return self.organization, self.repository

    def with_commit(self, commit_id: str) -> PullRequestRef:
        return replace(self, commit_id=commit_id)


def _host_as_written(netloc: str) -> str:
    host = netloc.rpartition("@")[2]
    if host.startswith("["):
        return host.partition("]")[0].removeprefix("[")
    return host.partition(":")[0]


def parse_pull_request_url(url: str) -> PullRequestRef:
    """Parse ``https://<host>/<org>/<repo>/pull/<number>`` into a reference."""

    try:
        parts = urlsplit(url.strip())
        # Validates the port; ``hostname`` would lowercase the host.
        _ = parts.port
    except ValueError as exc:
        raise MalformedReferenceError(url, str(exc)) from exc

    if parts.scheme not in {"http", "https"}:
        raise MalformedReferenceError(url, "expected an http(s) URL")
    host = _host_as_written(parts.netloc)
    if not host:
        raise MalformedReferenceError(url, "missing host")

    segments = parts.path.removeprefix("/").split("/")
    if len(segments) < 4 or segments[2] != _PULL_SEGMENT:
        raise MalformedReferenceError(url, "pr info missing in the URL")

    organization, repository, _, number = segments[:4]
    if not organization or not repository:
        raise MalformedReferenceError(url, "empty organization or repository")
    if not _NUMBER_PATTERN.fullmatch(number):
        raise MalformedReferenceError(url, f"invalid pull request number {number!r}")

    return PullRequestRef(
        host=host,
        organization=organization,
        repository=repository,
        number=int(number),
    )
