"""Fake ``RepositoryHost`` recording every call."""

from __future__ import annotations

from dataclasses import dataclass, field

from godocbot.domain.errors import HostUnavailableError
from godocbot.domain.ports import HostPullRequest


@dataclass
class FakeRepositoryHost:
    """Open pull requests per ``(organization, repository)``: number -> head commit."""

    pulls: dict[tuple[str, str], dict[int, str]] = field(default_factory=dict)
    failures: dict[tuple[str, str], Exception] = field(default_factory=dict)
    calls: list[tuple[str, ...]] = field(default_factory=list)

    def open(self, organization: str, repository: str, number: int, head: str) -> None:
        self.pulls.setdefault((organization, repository), {})[number] = head

    def close(self, organization: str, repository: str, number: int) -> None:
        self.pulls.get((organization, repository), {}).pop(number, None)

    def get_pull_request(self, organization: str, repository: str, number: int) -> HostPullRequest:
        self.calls.append(("get", organization, repository, str(number)))
        self._maybe_fail(organization, repository)
        head = self.pulls.get((organization, repository), {}).get(number)
        if head is None:
            raise HostUnavailableError(
                f"{organization}/{repository}#{number} not found", status_code=404
            )
        return HostPullRequest(number=number, head_commit=head)

    def list_pull_requests(self, organization: str, repository: str) -> list[HostPullRequest]:
        self.calls.append(("list", organization, repository))
        self._maybe_fail(organization, repository)
        return [
            HostPullRequest(number=number, head_commit=head)
            for number, head in sorted(self.pulls.get((organization, repository), {}).items())
        ]

    def list_calls(self) -> list[tuple[str, ...]]:
        return [call for call in self.calls if call[0] == "list"]

    def _maybe_fail(self, organization: str, repository: str) -> None:
        error = self.failures.get((organization, repository))
        if error is not None:
            raise error
