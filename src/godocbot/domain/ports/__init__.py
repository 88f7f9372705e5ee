"""Domain port definitions for adapters."""

from __future__ import annotations

from .repository_host import HostPullRequest, RepositoryHost
from .resource_store import EventType, ResourceStore, WatchEvent, WatchHandler

__all__ = [
    "EventType",
    "HostPullRequest",
    "RepositoryHost",
    "ResourceStore",
    "WatchEvent",
    "WatchHandler",
]
