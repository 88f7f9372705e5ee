"""Translate Kubernetes payloads into domain resources and back."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any

from godocbot.domain.model import (
    Container,
    ManagedWorkload,
    ObjectMeta,
    OwnerReference,
    PullRequestSpec,
    PullRequestStatus,
    TrackedPullRequest,
    WorkloadSpec,
    WorkloadStatus,
)

from .schema import DeploymentModel, ObjectMetaModel, PullRequestModel

if TYPE_CHECKING:
    from collections.abc import Mapping

    from godocbot.domain.model import Resource

type Payload = dict[str, Any]


def _meta_from_model(model: ObjectMetaModel, raw: Mapping[str, Any]) -> ObjectMeta:
    return ObjectMeta(
        name=model.name,
        namespace=model.namespace,
        uid=model.uid,
        resource_version=model.resource_version,
        labels=dict(model.labels),
        owner_references=[
            OwnerReference(
                api_version=reference.api_version,
                kind=reference.kind,
                name=reference.name,
                uid=reference.uid,
                controller=bool(reference.controller),
                block_owner_deletion=bool(reference.block_owner_deletion),
            )
            for reference in model.owner_references
        ],
        raw=raw,
    )


def decode_pull_request(payload: Mapping[str, Any]) -> TrackedPullRequest:
    model = PullRequestModel.model_validate(payload)
    return TrackedPullRequest(
        metadata=_meta_from_model(model.metadata, payload),
        spec=PullRequestSpec(url=model.spec.url, commit_id=model.spec.commit_id),
        status=PullRequestStatus(preview_link=model.status.preview_link),
    )


def decode_deployment(payload: Mapping[str, Any]) -> ManagedWorkload:
    model = DeploymentModel.model_validate(payload)
    spec = model.spec
    return ManagedWorkload(
        metadata=_meta_from_model(model.metadata, payload),
        spec=WorkloadSpec(
            replicas=spec.replicas,
            selector=dict(spec.selector.match_labels),
            template_labels=dict(spec.template.metadata.labels),
            containers=[
                Container(
                    name=container.name,
                    image=container.image,
                    command=list(container.command),
                    args=list(container.args),
                    image_pull_policy=container.image_pull_policy or "",
                )
                for container in spec.template.spec.containers
            ],
        ),
        status=WorkloadStatus(available_replicas=model.status.available_replicas),
    )


def _base_payload(resource: Resource) -> Payload:
    payload: Payload = copy.deepcopy(dict(resource.metadata.raw or {}))
    payload["apiVersion"] = resource.API_VERSION
    payload["kind"] = resource.KIND
    metadata = payload.setdefault("metadata", {})
    meta = resource.metadata
    metadata["name"] = meta.name
    if meta.namespace:
        metadata["namespace"] = meta.namespace
    if meta.resource_version:
        metadata["resourceVersion"] = meta.resource_version
    else:
        metadata.pop("resourceVersion", None)
    if meta.labels:
        metadata["labels"] = dict(meta.labels)
    if meta.owner_references:
        metadata["ownerReferences"] = [
            {
                "apiVersion": reference.api_version,
                "kind": reference.kind,
                "name": reference.name,
                "uid": reference.uid,
                "controller": reference.controller,
                "blockOwnerDeletion": reference.block_owner_deletion,
            }
            for reference in meta.owner_references
        ]
    return payload


def encode_pull_request(resource: TrackedPullRequest) -> Payload:
    payload = _base_payload(resource)
    spec = payload.setdefault("spec", {})
    spec["url"] = resource.spec.url
    if resource.spec.commit_id:
        spec["commit_id"] = resource.spec.commit_id
    else:
        spec.pop("commit_id", None)
    status = payload.setdefault("status", {})
    status["godoc_link"] = resource.status.preview_link
    return payload


def _merge_containers(existing: list[Payload], containers: list[Container]) -> list[Payload]:
    by_name = {entry.get("name"): entry for entry in existing}
    merged: list[Payload] = []
    for container in containers:
        entry = by_name.get(container.name, {})
        entry.update(
            {
                "name": container.name,
                "image": container.image,
                "command": list(container.command),
                "args": list(container.args),
            }
        )
        if container.image_pull_policy:
            entry["imagePullPolicy"] = container.image_pull_policy
        merged.append(entry)
    return merged


def encode_deployment(resource: ManagedWorkload) -> Payload:
    payload = _base_payload(resource)
    spec = payload.setdefault("spec", {})
    spec["replicas"] = resource.spec.replicas
    spec.setdefault("selector", {})["matchLabels"] = dict(resource.spec.selector)
    template = spec.setdefault("template", {})
    template.setdefault("metadata", {})["labels"] = dict(resource.spec.template_labels)
    pod_spec = template.setdefault("spec", {})
    pod_spec["containers"] = _merge_containers(
        pod_spec.get("containers", []), resource.spec.containers
    )
    # Status belongs to the deployment controller.
    payload.pop("status", None)
    return payload
