"""Application wiring: adapters, reconcilers and their controllers."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from godocbot.adapters.github import GitHubClient, GitHubRepositoryHost
from godocbot.adapters.kubernetes import KubernetesClient, KubernetesResourceStore, ensure_crd
from godocbot.config import (
    ControllerConfig,
    get_controller_config,
    get_github_config,
    get_kubernetes_config,
    get_preview_settings,
)
from godocbot.domain.model import ManagedWorkload, TrackedPullRequest
from godocbot.domain.preview import CommitRefresher, CommitResolver, PreviewDeployer
from godocbot.runtime import (
    Controller,
    PeriodicTask,
    Supervisor,
    WatchSource,
    enqueue_object,
    enqueue_owner,
)

if TYPE_CHECKING:
    import threading

    from godocbot.domain.ports import RepositoryHost, ResourceStore
    from godocbot.domain.preview import PreviewSettings

log = getLogger(__name__)


def build_supervisor(
    *,
    store: ResourceStore,
    host: RepositoryHost,
    config: ControllerConfig,
    preview_settings: PreviewSettings,
) -> Supervisor:
    """Assemble the controllers and periodic tasks from explicit collaborators."""

    supervisor = Supervisor(store=store, namespace=config.namespace)

    deployer = Controller("preview-deployer", PreviewDeployer(store, preview_settings))
    supervisor.add_controller(
        deployer,
        WatchSource(TrackedPullRequest, enqueue_object),
        WatchSource(ManagedWorkload, enqueue_owner(TrackedPullRequest.KIND)),
        workers=config.workers,
    )

    resolver = Controller("commit-resolver", CommitResolver(store, host))
    supervisor.add_controller(
        resolver,
        WatchSource(TrackedPullRequest, enqueue_object),
        workers=config.workers,
    )

    if config.enable_pr_sync:
        refresher = CommitRefresher(store, host, namespace=config.namespace)
        supervisor.add_periodic(
            PeriodicTask(
                name="commit-refresher",
                interval=config.sync_interval_seconds,
                fn=refresher.refresh,
            )
        )

    return supervisor


def run_controller(stop: threading.Event, *, config: ControllerConfig | None = None) -> None:
    """Run godocbot against the configured cluster and GitHub until ``stop`` is set."""

    effective_config = config or get_controller_config()
    kube_client = KubernetesClient(config=get_kubernetes_config())
    if effective_config.install_crds:
        ensure_crd(kube_client)

    store = KubernetesResourceStore(kube_client)
    host = GitHubRepositoryHost(GitHubClient(config=get_github_config()))
    log.info(
        "Starting godocbot: namespace=%s, workers=%s, pr_sync=%s, sync_interval=%ss",
        effective_config.namespace or "<all>",
        effective_config.workers,
        effective_config.enable_pr_sync,
        effective_config.sync_interval_seconds,
    )
    supervisor = build_supervisor(
        store=store,
        host=host,
        config=effective_config,
        preview_settings=get_preview_settings(),
    )
    supervisor.run(stop)
