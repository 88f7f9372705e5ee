from __future__ import annotations

import threading
from typing import TYPE_CHECKING

import pytest

from tests.helpers.hosts import FakeRepositoryHost
from tests.helpers.store import InMemoryResourceStore

if TYPE_CHECKING:
    from collections.abc import Iterator


_GODOCBOT_ENV = (
    "GITHUB_API_URL",
    "GITHUB_TOKEN",
    "GITHUB_TIMEOUT_SECONDS",
    "GITHUB_HTTP_CACHE_PATH",
    "KUBE_API_SERVER",
    "KUBE_TOKEN",
    "KUBE_TOKEN_FILE",
    "KUBE_CA_FILE",
    "KUBE_INSECURE_SKIP_TLS_VERIFY",
    "KUBE_WATCH_TIMEOUT_SECONDS",
    "KUBE_TIMEOUT_SECONDS",
    "KUBERNETES_SERVICE_HOST",
    "KUBERNETES_SERVICE_PORT",
    "GODOCBOT_LOG_LEVEL",
    "GODOCBOT_ENABLE_PR_SYNC",
    "GODOCBOT_SYNC_INTERVAL",
    "GODOCBOT_WORKERS",
    "GODOCBOT_NAMESPACE",
    "GODOCBOT_INSTALL_CRDS",
    "GODOCBOT_GODOC_IMAGE",
    "GODOCBOT_TUNNEL_IMAGE",
    "GODOCBOT_TUNNEL_HOST",
    "GODOCBOT_GODOC_PORT",
    "GODOCBOT_IMAGE_PULL_POLICY",
)


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _GODOCBOT_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store() -> InMemoryResourceStore:
    return InMemoryResourceStore()


@pytest.fixture
def host() -> FakeRepositoryHost:
    return FakeRepositoryHost()


@pytest.fixture
def stop() -> Iterator[threading.Event]:
    event = threading.Event()
    try:
        yield event
    finally:
        event.set()
