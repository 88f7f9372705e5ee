"""Static registry of the resource kinds the Kubernetes store can serve.

Each kind is registered once, at process start, with its API coordinates and
its (de)serializers. Stores look kinds up by domain type or by kind name.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from godocbot.domain.model import (
    PULL_REQUEST_GROUP,
    PULL_REQUEST_VERSION,
    ManagedWorkload,
    TrackedPullRequest,
)

from .translator import (
    decode_deployment,
    decode_pull_request,
    encode_deployment,
    encode_pull_request,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

    from godocbot.domain.model import ObjectKey, Resource


@dataclass(frozen=True, slots=True)
class ResourceKind[R: Resource]:
    model: type[R]
    group: str
    version: str
    plural: str
    decode: Callable[[Mapping[str, Any]], R]
    encode: Callable[[R], dict[str, Any]]

    @property
    def name(self) -> str:
        return self.model.KIND

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}" if self.group else self.version

    def collection_path(self, namespace: str | None = None) -> str:
        prefix = f"/apis/{self.group}/{self.version}" if self.group else f"/api/{self.version}"
        if namespace:
            return f"{prefix}/namespaces/{namespace}/{self.plural}"
        return f"{prefix}/{self.plural}"

    def item_path(self, key: ObjectKey) -> str:
        return f"{self.collection_path(key.namespace)}/{key.name}"


class UnknownKindError(LookupError):
    """Raised when a kind was never registered."""


class KindRegistry:
    def __init__(self) -> None:
        self._by_model: dict[type[Any], ResourceKind[Any]] = {}
        self._by_name: dict[str, ResourceKind[Any]] = {}

    def register(self, kind: ResourceKind[Any]) -> None:
        if kind.name in self._by_name or kind.model in self._by_model:
            raise ValueError(f"Kind {kind.name} is already registered")
        self._by_model[kind.model] = kind
        self._by_name[kind.name] = kind

    def for_model[R: Resource](self, model: type[R]) -> ResourceKind[R]:
        try:
            return self._by_model[model]
        except KeyError:
            raise UnknownKindError(f"No kind registered for {model.__name__}") from None

    def for_name(self, name: str) -> ResourceKind[Any]:
        try:
            return self._by_name[name]
        except KeyError:
            raise UnknownKindError(f"No kind registered under {name!r}") from None

    def __iter__(self) -> Iterator[ResourceKind[Any]]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)


PULL_REQUEST_KIND: ResourceKind[TrackedPullRequest] = ResourceKind(
    model=TrackedPullRequest,
    group=PULL_REQUEST_GROUP,
    version=PULL_REQUEST_VERSION,
    plural="pullrequests",
    decode=decode_pull_request,
    encode=encode_pull_request,
)

DEPLOYMENT_KIND: ResourceKind[ManagedWorkload] = ResourceKind(
    model=ManagedWorkload,
    group="apps",
    version="v1",
    plural="deployments",
    decode=decode_deployment,
    encode=encode_deployment,
)


def default_registry() -> KindRegistry:
    registry = KindRegistry()
    registry.register(PULL_REQUEST_KIND)
    registry.register(DEPLOYMENT_KIND)
    return registry
