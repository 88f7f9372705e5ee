"""Port for the declarative resource store (e.g. the Kubernetes API server)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

    from godocbot.domain.model import ObjectKey, Resource


class EventType(StrEnum):
    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"


@dataclass(frozen=True, slots=True)
class WatchEvent:
    """A change notification for a single resource."""

    type: EventType
    resource: Resource


type WatchHandler = Callable[[WatchEvent], None]


@runtime_checkable
class ResourceStore(Protocol):
    """Get/list/create/update/delete by key plus change notifications.

    Writes use optimistic concurrency: ``update`` raises
    ``StoreWriteConflictError`` when the resource changed since it was read.
    Creating a resource that carries an owner reference makes the store delete
    it together with its owner.
    """

    def get[R: Resource](self, kind: type[R], key: ObjectKey) -> R: ...

    def list[R: Resource](self, kind: type[R], *, namespace: str | None = None) -> list[R]: ...

    def create[R: Resource](self, resource: R) -> R: ...

    def update[R: Resource](self, resource: R) -> R: ...

    def delete(self, kind: type[Resource], key: ObjectKey) -> None: ...

    def watch(
        self,
        kind: type[Resource],
        handler: WatchHandler,
        *,
        stop: threading.Event,
        namespace: str | None = None,
    ) -> None:
        """Deliver every existing and future change of ``kind`` until ``stop`` is set."""
        ...


__all__ = ["EventType", "ResourceStore", "WatchEvent", "WatchHandler"]
