"""Documentation previews for pull requests."""

from __future__ import annotations

from .commit_sync import CommitRefresher, CommitResolver, RefreshResult, group_by_repository
from .deployer import DeployAction, PreviewDeployer
from .refs import PullRequestRef, parse_pull_request_url
from .workload import (
    DEFAULT_PREVIEW_SETTINGS,
    PreviewSettings,
    build_workload,
    build_workload_spec,
    preview_link,
    served_commit,
)

__all__ = [
    "DEFAULT_PREVIEW_SETTINGS",
    "CommitRefresher",
    "CommitResolver",
    "DeployAction",
    "PreviewDeployer",
    "PreviewSettings",
    "PullRequestRef",
    "RefreshResult",
    "build_workload",
    "build_workload_spec",
    "group_by_repository",
    "parse_pull_request_url",
    "preview_link",
    "served_commit",
]
