"""Queue-driven reconcile loop.

A controller owns a ``WorkQueue`` of object keys. Watch handlers map change
notifications to keys and enqueue them; worker threads pop keys and hand them
to the reconciler. Failures are requeued with exponential backoff.
"""

from __future__ import annotations

import threading
from logging import getLogger
from typing import TYPE_CHECKING, Any, Protocol

from godocbot.domain.model import ObjectKey

from .workqueue import ShutDownError, WorkQueue

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from godocbot.domain.ports import WatchEvent, WatchHandler

log = getLogger(__name__)

type KeyMapper = Callable[[WatchEvent], Iterable[ObjectKey]]

WORKER_POLL_SECONDS = 1.0


class Reconciler(Protocol):
    def reconcile(self, key: ObjectKey) -> Any: ...


def enqueue_object(event: WatchEvent) -> list[ObjectKey]:
    """Map an event to the key of the resource it is about."""

    return [event.resource.key]


def enqueue_owner(owner_kind: str) -> KeyMapper:
    """Map an event to the key of the resource's controlling owner of ``owner_kind``."""

    def mapper(event: WatchEvent) -> list[ObjectKey]:
        metadata = event.resource.metadata
        owner = metadata.controller_owner()
        if owner is None or owner.kind != owner_kind:
            return []
        return [ObjectKey(namespace=metadata.namespace, name=owner.name)]

    return mapper


class Controller:
    def __init__(
        self,
        name: str,
        reconciler: Reconciler,
        *,
        queue: WorkQueue[ObjectKey] | None = None,
    ) -> None:
        self.name = name
        self.reconciler = reconciler
        self.queue: WorkQueue[ObjectKey] = queue if queue is not None else WorkQueue()

    def enqueue(self, key: ObjectKey) -> None:
        self.queue.add(key)

    def handler(self, mapper: KeyMapper = enqueue_object) -> WatchHandler:
        """Watch handler that enqueues the keys ``mapper`` derives from each event."""

        def handle(event: WatchEvent) -> None:
            for key in mapper(event):
                log.debug("%s: %s %s -> %s", self.name, event.type, event.resource.key, key)
                self.queue.add(key)

        return handle

    def process_next_item(self, timeout: float | None = None) -> bool:
        """Reconcile one key. Returns ``False`` once the queue is shut down."""

        try:
            key = self.queue.get(timeout=timeout)
        except ShutDownError:
            return False
        if key is None:
            return True
        try:
            result = self.reconciler.reconcile(key)
        except Exception:
            failures = self.queue.failures(key)
            log.exception(
                "%s: reconcile of %s failed (attempt %s), requeueing",
                self.name,
                key,
                failures + 1,
            )
            self.queue.add_rate_limited(key)
        else:
            log.debug("%s: reconciled %s: %s", self.name, key, result)
            self.queue.forget(key)
        finally:
            self.queue.done(key)
        return True

    def run(self, stop: threading.Event, *, workers: int = 1) -> list[threading.Thread]:
        """Start ``workers`` threads that process keys until ``stop`` is set."""

        threads = [
            threading.Thread(
                target=self._worker,
                args=(stop,),
                name=f"{self.name}-worker-{index}",
                daemon=True,
            )
            for index in range(workers)
        ]
        for thread in threads:
            thread.start()
        log.info("%s: started %s worker(s)", self.name, workers)
        return threads

    def shut_down(self) -> None:
        self.queue.shut_down()

    def _worker(self, stop: threading.Event) -> None:
        while not stop.is_set():
            if not self.process_next_item(timeout=WORKER_POLL_SECONDS):
                return
