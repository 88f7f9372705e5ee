"""Keep ``spec.commit_id`` of tracked pull requests in line with the host.

Two entry points share that job:

* ``CommitResolver`` reacts to change notifications and fills in the commit of
  pull requests that do not have one yet.
* ``CommitRefresher`` runs periodically, lists every tracked pull request,
  groups them by repository so one host call covers a whole repository, and
  writes back head commits that moved.

Both are the only writers of ``spec.commit_id``. Pull requests that vanished
from the host's open list are logged and kept.
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from godocbot.domain.errors import (
    MalformedReferenceError,
    NotFoundError,
    RepositoryHostError,
    StoreError,
)
from godocbot.domain.model import TrackedPullRequest

from .refs import parse_pull_request_url

if TYPE_CHECKING:
    import threading

    from godocbot.domain.model import ObjectKey
    from godocbot.domain.ports import HostPullRequest, RepositoryHost, ResourceStore

log = getLogger(__name__)

type RepoKey = tuple[str, str]
type RepoGroups = dict[RepoKey, dict[int, list[TrackedPullRequest]]]


@dataclass(slots=True)
class CommitResolver:
    """Resolve the head commit of newly tracked pull requests."""

    store: ResourceStore
    host: RepositoryHost

    def reconcile(self, key: ObjectKey) -> str | None:
        """Return the commit written to ``key``, or ``None`` if nothing changed."""

        try:
            pull_request = self.store.get(TrackedPullRequest, key)
        except NotFoundError:
            log.info("PullRequest %s not found, nothing to resolve", key)
            return None

        if pull_request.commit_resolved:
            return None

        try:
            ref = parse_pull_request_url(pull_request.spec.url)
        except MalformedReferenceError as exc:
            log.warning("Ignoring PullRequest %s: %s", key, exc)
            return None

        log.info("Fetching head commit for %s (%s)", key, pull_request.spec.url)
        host_pr = self.host.get_pull_request(ref.organization, ref.repository, ref.number)

        updated = pull_request.deep_copy()
        updated.spec.commit_id = host_pr.head_commit
        self.store.update(updated)
        log.info("Resolved commit of %s to %s", key, host_pr.head_commit)
        return host_pr.head_commit


@dataclass(slots=True)
class RefreshResult:
    repositories: int = 0
    host_calls: int = 0
    updated: list[ObjectKey] = field(default_factory=list)
    unchanged: int = 0
    orphaned: list[ObjectKey] = field(default_factory=list)
    skipped: list[ObjectKey] = field(default_factory=list)
    failures: int = 0
    aborted: bool = False


@dataclass(slots=True)
class CommitRefresher:
    """Batch refresh of every tracked pull request's commit."""

    store: ResourceStore
    host: RepositoryHost
    namespace: str | None = None

    def refresh(self, stop: threading.Event | None = None) -> RefreshResult:
        result = RefreshResult()
        tracked = self.store.list(TrackedPullRequest, namespace=self.namespace)
        groups = group_by_repository(tracked, skipped=result.skipped)
        result.repositories = len(groups)
        log.info(
            "Refreshing commits: pull_requests=%s, repositories=%s",
            len(tracked),
            len(groups),
        )

        for (organization, repository), by_number in groups.items():
            if stop is not None and stop.is_set():
                log.info("Stop requested, abandoning commit refresh")
                result.aborted = True
                break
            self._refresh_repository(organization, repository, by_number, result)

        log.info(
            "Finished commit refresh: updated=%s, unchanged=%s, orphaned=%s, failures=%s",
            len(result.updated),
            result.unchanged,
            len(result.orphaned),
            result.failures,
        )
        return result

    def _refresh_repository(
        self,
        organization: str,
        repository: str,
        by_number: dict[int, list[TrackedPullRequest]],
        result: RefreshResult,
    ) -> None:
        result.host_calls += 1
        try:
            host_prs = self.host.list_pull_requests(organization, repository)
        except RepositoryHostError as exc:
            log.warning("Cannot list pull requests of %s/%s: %s", organization, repository, exc)
            result.failures += 1
            return

        open_numbers: set[int] = set()
        for host_pr in host_prs:
            open_numbers.add(host_pr.number)
            tracked = by_number.get(host_pr.number)
            if not tracked:
                log.debug(
                    "Untracked pull request %s/%s#%s", organization, repository, host_pr.number
                )
                continue
            for pull_request in tracked:
                self._apply_head_commit(pull_request, host_pr, result)

        for number, tracked in by_number.items():
            if number in open_numbers:
                continue
            for pull_request in tracked:
                # TODO: delete pull requests that were closed or merged on the host
                log.info(
                    "PullRequest %s (%s/%s#%s) is no longer open on the host",
                    pull_request.key,
                    organization,
                    repository,
                    number,
                )
                result.orphaned.append(pull_request.key)

    def _apply_head_commit(
        self,
        pull_request: TrackedPullRequest,
        host_pr: HostPullRequest,
        result: RefreshResult,
    ) -> None:
        current = pull_request.spec.commit_id
        if current == host_pr.head_commit:
            result.unchanged += 1
            return

        log.info(
            "PullRequest %s moved: %s -> %s",
            pull_request.key,
            current or "<unresolved>",
            host_pr.head_commit,
        )
        updated = pull_request.deep_copy()
        updated.spec.commit_id = host_pr.head_commit
        try:
            self.store.update(updated)
        except StoreError as exc:
            log.warning("Cannot update PullRequest %s: %s", pull_request.key, exc)
            result.failures += 1
            return
        result.updated.append(pull_request.key)


def group_by_repository(
    pull_requests: list[TrackedPullRequest],
    *,
    skipped: list[ObjectKey] | None = None,
) -> RepoGroups:
    """Index pull requests by ``(organization, repository)`` and number.

    Names are compared exactly, as the host reports them. Pull requests with
    an unparsable URL are left out and, if given, appended to ``skipped``.
    """

    groups: RepoGroups = defaultdict(lambda: defaultdict(list))
    for pull_request in pull_requests:
        try:
            ref = parse_pull_request_url(pull_request.spec.url)
        except MalformedReferenceError as exc:
            log.warning("Skipping PullRequest %s: %s", pull_request.key, exc)
            if skipped is not None:
                skipped.append(pull_request.key)
            continue
        groups[ref.repo_key][ref.number].append(pull_request)
    return {repo: dict(by_number) for repo, by_number in groups.items()}
