"""Converge a tracked pull request and its preview workload.

Each call evaluates one pull request and issues at most one mutation:

==========================================  ==================================
observed state                              action
==========================================  ==================================
pull request not found                      nothing (it was deleted)
``spec.commit_id`` empty                    nothing, wait for the commit syncer
no workload                                 create it, owned by the pull request
workload commit != ``spec.commit_id``       rewrite the godoc arguments
link empty and workload available           publish ``status.preview_link``
anything else                               nothing
==========================================  ==================================

The deployer only reads ``spec.commit_id``; the commit syncer is its only
writer. Store failures propagate so the caller can requeue the key.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from godocbot.domain.errors import MalformedReferenceError, NotFoundError
from godocbot.domain.model import ManagedWorkload, TrackedPullRequest

from .refs import parse_pull_request_url
from .workload import (
    DEFAULT_PREVIEW_SETTINGS,
    PreviewSettings,
    build_workload,
    build_workload_spec,
    godoc_container_args,
    preview_link,
    served_commit,
)

if TYPE_CHECKING:
    from godocbot.domain.model import ObjectKey
    from godocbot.domain.ports import ResourceStore

    from .refs import PullRequestRef

log = getLogger(__name__)


class DeployAction(StrEnum):
    GONE = "gone"
    AWAITING_COMMIT = "awaiting-commit"
    MALFORMED = "malformed"
    CREATED = "created"
    UPDATED = "updated"
    LINK_PUBLISHED = "link-published"
    UNCHANGED = "unchanged"


@dataclass(slots=True)
class PreviewDeployer:
    """Reconciler keeping one godoc preview workload per tracked pull request."""

    store: ResourceStore
    settings: PreviewSettings = field(default=DEFAULT_PREVIEW_SETTINGS)

    def reconcile(self, key: ObjectKey) -> DeployAction:
        log.debug("Reconciling preview for %s", key)
        try:
            pull_request = self.store.get(TrackedPullRequest, key)
        except NotFoundError:
            log.info("PullRequest %s not found, nothing to deploy", key)
            return DeployAction.GONE

        if not pull_request.commit_resolved:
            log.info("Waiting for commit id of PullRequest %s", key)
            return DeployAction.AWAITING_COMMIT

        try:
            ref = parse_pull_request_url(pull_request.spec.url).with_commit(
                pull_request.spec.commit_id
            )
        except MalformedReferenceError as exc:
            log.warning("Ignoring PullRequest %s: %s", key, exc)
            return DeployAction.MALFORMED

        try:
            workload = self.store.get(ManagedWorkload, key)
        except NotFoundError:
            self._create_workload(pull_request, ref)
            return DeployAction.CREATED

        if served_commit(workload) != ref.commit_id:
            self._update_commit(workload, ref)
            return DeployAction.UPDATED

        if not pull_request.status.preview_link and workload.ready:
            self._publish_link(pull_request, ref)
            return DeployAction.LINK_PUBLISHED

        return DeployAction.UNCHANGED

    def _create_workload(self, pull_request: TrackedPullRequest, ref: PullRequestRef) -> None:
        log.info("Creating preview workload for %s at %s", pull_request.key, ref.commit_id)
        self.store.create(build_workload(pull_request, ref, self.settings))

    def _update_commit(self, workload: ManagedWorkload, ref: PullRequestRef) -> None:
        log.info(
            "Preview workload %s serves %s, moving to %s",
            workload.key,
            served_commit(workload),
            ref.commit_id,
        )
        updated = workload.deep_copy()
        if updated.spec.containers:
            updated.spec.containers[0].args = godoc_container_args(ref)
        else:
            updated.spec.containers = build_workload_spec(ref, self.settings).containers
        self.store.update(updated)

    def _publish_link(self, pull_request: TrackedPullRequest, ref: PullRequestRef) -> None:
        updated = pull_request.deep_copy()
        updated.status.preview_link = preview_link(ref, self.settings)
        self.store.update(updated)
        log.info("Preview link for %s: %s", pull_request.key, updated.status.preview_link)
