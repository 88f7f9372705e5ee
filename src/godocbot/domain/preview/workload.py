"""Build the documentation-preview workload for a pull request.

The workload runs two containers: ``godoc`` fetches the pull request at the
given commit and serves its documentation on ``local_port``; ``ssh`` opens a
reverse tunnel publishing that port under ``<subdomain>.<tunnel_host>``.

Everything here is pure: the same reference and settings always produce an
identical spec, which is what lets the deployer detect drift by comparing the
commit slot of the argument list only.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Final

from godocbot.domain.model import (
    Container,
    ManagedWorkload,
    ObjectMeta,
    OwnerReference,
    WorkloadSpec,
)

if TYPE_CHECKING:
    from godocbot.domain.model import TrackedPullRequest

    from .refs import PullRequestRef

GODOC_CONTAINER: Final[str] = "godoc"
TUNNEL_CONTAINER: Final[str] = "ssh"
FETCH_SCRIPT: Final[str] = "fetch_serve.sh"
COMMIT_ARG_INDEX: Final[int] = 5
WORKLOAD_REPLICAS: Final[int] = 1


@dataclass(frozen=True, slots=True)
class PreviewSettings:
    godoc_image: str = "gcr.io/sunilarora-sandbox/godoc:0.0.1"
    tunnel_image: str = "gcr.io/sunilarora-sandbox/ssh-client:0.0.2"
    tunnel_host: str = "serveo.net"
    local_port: int = 6060
    image_pull_policy: str = "Always"


DEFAULT_PREVIEW_SETTINGS: Final = PreviewSettings()


def selector_labels(ref: PullRequestRef) -> dict[str, str]:
    return {"org": ref.organization, "repo": ref.repository}


def godoc_container_args(ref: PullRequestRef) -> list[str]:
    """Argument list for the godoc container; the commit is always last."""
    return [FETCH_SCRIPT, ref.host, ref.organization, ref.repository, str(ref.number), ref.commit_id]


def tunnel_container_args(ref: PullRequestRef, settings: PreviewSettings) -> list[str]:
    forward = f"{ref.subdomain}:80:localhost:{settings.local_port}"
    return ["-tt", "-o", "StrictHostKeyChecking=no", "-R", forward, settings.tunnel_host]


def preview_link(ref: PullRequestRef, settings: PreviewSettings = DEFAULT_PREVIEW_SETTINGS) -> str:
    return (
        f"https://{ref.subdomain}.{settings.tunnel_host}"
        f"/pkg/{ref.host}/{ref.organization}/{ref.repository}"
    )


def served_commit(workload: ManagedWorkload) -> str | None:
    """Commit encoded in the workload's godoc arguments, ``None`` if absent."""

    if not workload.spec.containers:
        return None
    args = workload.spec.containers[0].args
    if len(args) <= COMMIT_ARG_INDEX:
        return None
    return args[COMMIT_ARG_INDEX]


def build_workload_spec(
    ref: PullRequestRef,
    settings: PreviewSettings = DEFAULT_PREVIEW_SETTINGS,
) -> WorkloadSpec:
    labels = selector_labels(ref)
    return WorkloadSpec(
        replicas=WORKLOAD_REPLICAS,
        selector=dict(labels),
        template_labels=dict(labels),
        containers=[
            Container(
                name=GODOC_CONTAINER,
                image=settings.godoc_image,
                command=["/bin/bash"],
                args=godoc_container_args(ref),
                image_pull_policy=settings.image_pull_policy,
            ),
            Container(
                name=TUNNEL_CONTAINER,
                image=settings.tunnel_image,
                command=["ssh"],
                args=tunnel_container_args(ref, settings),
                image_pull_policy=settings.image_pull_policy,
            ),
        ],
    )


def owner_reference_for(owner: TrackedPullRequest) -> OwnerReference:
    return OwnerReference(
        api_version=owner.API_VERSION,
        kind=owner.KIND,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
        controller=True,
        block_owner_deletion=True,
    )


def build_workload(
    owner: TrackedPullRequest,
    ref: PullRequestRef,
    settings: PreviewSettings = DEFAULT_PREVIEW_SETTINGS,
) -> ManagedWorkload:
    """Workload for ``owner``: same name and namespace, controlled by the owner."""

    return ManagedWorkload(
        metadata=ObjectMeta(
            name=owner.metadata.name,
            namespace=owner.metadata.namespace,
            owner_references=[owner_reference_for(owner)],
        ),
        spec=build_workload_spec(ref, settings),
    )
