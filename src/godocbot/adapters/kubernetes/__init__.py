"""Kubernetes adapter package."""

from __future__ import annotations

from .client import KubernetesAPIError, KubernetesClient
from .crd import ensure_crd, pull_request_crd
from .registry import (
    DEPLOYMENT_KIND,
    PULL_REQUEST_KIND,
    KindRegistry,
    ResourceKind,
    UnknownKindError,
    default_registry,
)
from .store import KubernetesResourceStore

__all__ = [
    "DEPLOYMENT_KIND",
    "PULL_REQUEST_KIND",
    "KindRegistry",
    "KubernetesAPIError",
    "KubernetesClient",
    "KubernetesResourceStore",
    "ResourceKind",
    "UnknownKindError",
    "default_registry",
    "ensure_crd",
    "pull_request_crd",
]
