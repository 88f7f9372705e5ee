"""``ResourceStore`` implementation backed by the Kubernetes API server."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from godocbot.domain.errors import (
    AlreadyExistsError,
    NotFoundError,
    StoreError,
    StoreWriteConflictError,
)
from godocbot.domain.ports import EventType, WatchEvent

from .client import KubernetesAPIError, status_error
from .registry import KindRegistry, default_registry
from .schema import ListMetaModel

if TYPE_CHECKING:
    import threading
    from collections.abc import Iterator

    from godocbot.domain.model import ObjectKey, Resource
    from godocbot.domain.ports import ResourceStore, WatchHandler

    from .client import KubernetesClient, Payload
    from .registry import ResourceKind

log = getLogger(__name__)

WATCH_RETRY_SECONDS = 5.0


class _WatchExpiredError(Exception):
    """The watch resource version is too old; a fresh list is required."""


@dataclass(slots=True)
class KubernetesResourceStore:
    client: KubernetesClient
    registry: KindRegistry = field(default_factory=default_registry)

    def get[R: Resource](self, kind: type[R], key: ObjectKey) -> R:
        resource_kind = self.registry.for_model(kind)
        with _translate_errors(resource_kind, key):
            payload = self.client.get(resource_kind.item_path(key))
        return _decode(resource_kind, payload)

    def list[R: Resource](self, kind: type[R], *, namespace: str | None = None) -> list[R]:
        resource_kind = self.registry.for_model(kind)
        items, _ = self._list_payloads(resource_kind, namespace)
        decoded = (_decode_or_skip(resource_kind, item) for item in items)
        return [resource for resource in decoded if resource is not None]

    def create[R: Resource](self, resource: R) -> R:
        resource_kind = self.registry.for_model(type(resource))
        body = resource_kind.encode(resource)
        body["metadata"].pop("resourceVersion", None)
        with _translate_errors(resource_kind, resource.key, creating=True):
            payload = self.client.create(resource_kind.collection_path(resource.key.namespace), body)
        return _decode(resource_kind, payload)

    def update[R: Resource](self, resource: R) -> R:
        resource_kind = self.registry.for_model(type(resource))
        body = resource_kind.encode(resource)
        with _translate_errors(resource_kind, resource.key):
            payload = self.client.replace(resource_kind.item_path(resource.key), body)
        return _decode(resource_kind, payload)

    def delete(self, kind: type[Resource], key: ObjectKey) -> None:
        resource_kind = self.registry.for_model(kind)
        with _translate_errors(resource_kind, key):
            self.client.delete(resource_kind.item_path(key))

    def watch(
        self,
        kind: type[Resource],
        handler: WatchHandler,
        *,
        stop: threading.Event,
        namespace: str | None = None,
    ) -> None:
        """List, then watch, re-listing whenever the watch expires or fails."""

        resource_kind = self.registry.for_model(kind)
        while not stop.is_set():
            try:
                self._list_and_watch(resource_kind, handler, stop=stop, namespace=namespace)
            except _WatchExpiredError:
                log.info("Watch on %s expired, re-listing", resource_kind.name)
            except (StoreError, KubernetesAPIError, ValidationError, httpx.HTTPError) as exc:
                log.warning(
                    "Watch on %s failed: %s; retrying in %ss",
                    resource_kind.name,
                    exc,
                    WATCH_RETRY_SECONDS,
                )
                stop.wait(WATCH_RETRY_SECONDS)

    def _list_and_watch(
        self,
        resource_kind: ResourceKind[Any],
        handler: WatchHandler,
        *,
        stop: threading.Event,
        namespace: str | None,
    ) -> None:
        items, resource_version = self._list_payloads(resource_kind, namespace)
        for item in items:
            resource = _decode_or_skip(resource_kind, item)
            if resource is not None:
                handler(WatchEvent(type=EventType.ADDED, resource=resource))

        def on_event(event: Payload) -> None:
            nonlocal resource_version
            event_type = event.get("type")
            obj = event.get("object") or {}
            if event_type == "ERROR":
                error = status_error(obj)
                if error.gone:
                    raise _WatchExpiredError
                raise error
            resource_version = obj.get("metadata", {}).get("resourceVersion", resource_version)
            if event_type == "BOOKMARK":
                return
            try:
                parsed_type = EventType(event_type)
            except ValueError:
                log.warning("Ignoring %s watch event of type %r", resource_kind.name, event_type)
                return
            resource = _decode_or_skip(resource_kind, obj)
            if resource is not None:
                handler(WatchEvent(type=parsed_type, resource=resource))

        path = resource_kind.collection_path(namespace)
        while not stop.is_set():
            try:
                self.client.watch(
                    path,
                    resource_version=resource_version,
                    handler=on_event,
                    stop=stop,
                )
            except KubernetesAPIError as exc:
                if exc.gone:
                    raise _WatchExpiredError from exc
                raise

    def _list_payloads(
        self, resource_kind: ResourceKind[Any], namespace: str | None
    ) -> tuple[list[Payload], str]:
        with _translate_errors(resource_kind, None):
            listing = self.client.get(resource_kind.collection_path(namespace))
        meta = ListMetaModel.model_validate(listing.get("metadata") or {})
        items = listing.get("items") or []
        return list(items), meta.resource_version


def _decode[R: Resource](resource_kind: ResourceKind[R], payload: Payload) -> R:
    try:
        return resource_kind.decode(payload)
    except ValidationError as exc:
        raise StoreError(f"Cannot decode {resource_kind.name}: {exc}") from exc


def _decode_or_skip[R: Resource](resource_kind: ResourceKind[R], payload: Payload) -> R | None:
    try:
        return _decode(resource_kind, payload)
    except StoreError as exc:
        log.warning("Skipping undecodable object: %s", exc)
        return None


@contextmanager
def _translate_errors(
    resource_kind: ResourceKind[Any],
    key: ObjectKey | None,
    *,
    creating: bool = False,
) -> Iterator[None]:
    """Map API failures of one request to the domain's store errors."""

    try:
        yield
    except KubernetesAPIError as exc:
        raise _store_error(resource_kind.name, key, exc, creating=creating) from exc
    except httpx.HTTPError as exc:
        raise StoreError(f"{resource_kind.name} request failed: {exc}") from exc


def _store_error(
    kind: str, key: ObjectKey | None, exc: KubernetesAPIError, *, creating: bool
) -> StoreError:
    if key is None:
        return StoreError(str(exc))
    if exc.not_found:
        return NotFoundError(kind, key)
    if exc.conflict and (creating or exc.already_exists):
        return AlreadyExistsError(kind, key)
    if exc.conflict:
        return StoreWriteConflictError(kind, key, detail=str(exc))
    return StoreError(str(exc))
