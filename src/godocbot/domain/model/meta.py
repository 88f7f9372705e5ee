"""Identity and ownership metadata common to every stored resource."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, order=True)
class ObjectKey:
    """Namespace-qualified name identifying a resource within its kind."""

    namespace: str
    name: str

    def __str__(self) -> str:
        if not self.namespace:
            return self.name
        return f"{self.namespace}/{self.name}"

    @classmethod
    def parse(cls, value: str) -> ObjectKey:
        namespace, _, name = value.rpartition("/")
        if not name:
            raise ValueError(f"Invalid object key: {value!r}")
        return cls(namespace=namespace, name=name)


@dataclass(frozen=True, slots=True)
class OwnerReference:
    """Directed ownership edge from a child resource to its owner.

    The store deletes the child once the owner is gone. ``controller`` marks the
    single owner that manages the child.
    """

    api_version: str
    kind: str
    name: str
    uid: str
    controller: bool = True
    block_owner_deletion: bool = True


@dataclass(slots=True)
class ObjectMeta:
    name: str
    namespace: str = ""
    uid: str = ""
    resource_version: str = ""
    labels: dict[str, str] = field(default_factory=dict)
    owner_references: list[OwnerReference] = field(default_factory=list)
    # Wire payload the resource was decoded from; stores use it to keep fields
    # they do not model intact across updates.
    raw: Mapping[str, Any] | None = field(default=None, repr=False, compare=False)

    @property
    def key(self) -> ObjectKey:
        return ObjectKey(namespace=self.namespace, name=self.name)

    def controller_owner(self) -> OwnerReference | None:
        for reference in self.owner_references:
            if reference.controller:
                return reference
        return None
