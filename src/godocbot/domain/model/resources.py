"""Resources managed by godocbot.

``TrackedPullRequest`` is written by users (``spec.url``) and by the commit
syncer (``spec.commit_id``); ``ManagedWorkload`` is generated by the preview
deployer and owned by its pull request.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import ClassVar, Protocol, Self, runtime_checkable

from .meta import ObjectKey, ObjectMeta

PULL_REQUEST_GROUP = "code.godocbot.io"
PULL_REQUEST_VERSION = "v1alpha1"
PULL_REQUEST_API_VERSION = f"{PULL_REQUEST_GROUP}/{PULL_REQUEST_VERSION}"


@runtime_checkable
class Resource(Protocol):
    """Anything the resource store can hold."""

    KIND: ClassVar[str]
    API_VERSION: ClassVar[str]

    metadata: ObjectMeta

    @property
    def key(self) -> ObjectKey: ...


class _ResourceMixin:
    __slots__ = ()

    metadata: ObjectMeta

    @property
    def key(self) -> ObjectKey:
        return self.metadata.key

    def deep_copy(self) -> Self:
        """Return an independent copy for read-modify-write updates."""
        return copy.deepcopy(self)


@dataclass(slots=True)
class PullRequestSpec:
    url: str
    commit_id: str = ""


@dataclass(slots=True)
class PullRequestStatus:
    preview_link: str = ""


@dataclass(slots=True)
class TrackedPullRequest(_ResourceMixin):
    KIND: ClassVar[str] = "PullRequest"
    API_VERSION: ClassVar[str] = PULL_REQUEST_API_VERSION

    metadata: ObjectMeta
    spec: PullRequestSpec
    status: PullRequestStatus = field(default_factory=PullRequestStatus)

    @property
    def commit_resolved(self) -> bool:
        return bool(self.spec.commit_id)


@dataclass(slots=True)
class Container:
    name: str
    image: str
    command: list[str] = field(default_factory=list)
    args: list[str] = field(default_factory=list)
    image_pull_policy: str = "Always"


@dataclass(slots=True)
class WorkloadSpec:
    replicas: int
    selector: dict[str, str]
    template_labels: dict[str, str]
    containers: list[Container]


@dataclass(slots=True)
class WorkloadStatus:
    available_replicas: int = 0


@dataclass(slots=True)
class ManagedWorkload(_ResourceMixin):
    KIND: ClassVar[str] = "Deployment"
    API_VERSION: ClassVar[str] = "apps/v1"

    metadata: ObjectMeta
    spec: WorkloadSpec
    status: WorkloadStatus = field(default_factory=WorkloadStatus)

    @property
    def ready(self) -> bool:
        return self.status.available_replicas > 0
