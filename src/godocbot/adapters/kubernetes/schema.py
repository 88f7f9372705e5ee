"""Pydantic models for the Kubernetes objects godocbot reads.

Only the fields the translators need are modelled; everything else is kept
in the raw payload so updates write it back unchanged.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class KubeModel(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


class OwnerReferenceModel(KubeModel):
    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool | None = None
    block_owner_deletion: bool | None = None


class ObjectMetaModel(KubeModel):
    name: str
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    labels: dict[str, str] = Field(default_factory=dict)
    owner_references: list[OwnerReferenceModel] = Field(default_factory=list["OwnerReferenceModel"])


class PullRequestSpecModel(KubeModel):
    url: str = ""
    commit_id: str = Field(default="", alias="commit_id")


class PullRequestStatusModel(KubeModel):
    preview_link: str = Field(default="", alias="godoc_link")


class PullRequestModel(KubeModel):
    metadata: ObjectMetaModel
    spec: PullRequestSpecModel = Field(default_factory=PullRequestSpecModel)
    status: PullRequestStatusModel = Field(default_factory=PullRequestStatusModel)


class ContainerModel(KubeModel):
    name: str
    image: str = ""
    command: list[str] = Field(default_factory=list)
    args: list[str] = Field(default_factory=list)
    image_pull_policy: str | None = None


class PodSpecModel(KubeModel):
    containers: list[ContainerModel] = Field(default_factory=list["ContainerModel"])


class TemplateMetaModel(KubeModel):
    labels: dict[str, str] = Field(default_factory=dict)


class PodTemplateModel(KubeModel):
    metadata: TemplateMetaModel = Field(default_factory=TemplateMetaModel)
    spec: PodSpecModel = Field(default_factory=PodSpecModel)


class LabelSelectorModel(KubeModel):
    match_labels: dict[str, str] = Field(default_factory=dict)


class DeploymentSpecModel(KubeModel):
    replicas: int = 1
    selector: LabelSelectorModel = Field(default_factory=LabelSelectorModel)
    template: PodTemplateModel = Field(default_factory=PodTemplateModel)


class DeploymentStatusModel(KubeModel):
    available_replicas: int = 0


class DeploymentModel(KubeModel):
    metadata: ObjectMetaModel
    spec: DeploymentSpecModel = Field(default_factory=DeploymentSpecModel)
    status: DeploymentStatusModel = Field(default_factory=DeploymentStatusModel)


class ListMetaModel(KubeModel):
    resource_version: str = ""


class StatusModel(KubeModel):
    """``Status`` object returned with API errors."""

    status: str | None = None
    message: str = ""
    reason: str = ""
    code: int | None = None
