"""Public domain model surface."""

from __future__ import annotations

from godocbot.domain.model.meta import ObjectKey, ObjectMeta, OwnerReference
from godocbot.domain.model.resources import (
    PULL_REQUEST_API_VERSION,
    PULL_REQUEST_GROUP,
    PULL_REQUEST_VERSION,
    Container,
    ManagedWorkload,
    PullRequestSpec,
    PullRequestStatus,
    Resource,
    TrackedPullRequest,
    WorkloadSpec,
    WorkloadStatus,
)

__all__ = [
    "PULL_REQUEST_API_VERSION",
    "PULL_REQUEST_GROUP",
    "PULL_REQUEST_VERSION",
    "Container",
    "ManagedWorkload",
    "ObjectKey",
    "ObjectMeta",
    "OwnerReference",
    "PullRequestSpec",
    "PullRequestStatus",
    "Resource",
    "TrackedPullRequest",
    "WorkloadSpec",
    "WorkloadStatus",
]
