"""Start and stop every long-running activity of the process.

The supervisor runs one watch thread per registered source, the worker
threads of each controller and any periodic tasks. All of them observe a
single ``threading.Event``; setting it stops the whole process.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from .periodic import run_every

if TYPE_CHECKING:
    from collections.abc import Callable

    from godocbot.domain.model import Resource
    from godocbot.domain.ports import ResourceStore

    from .controller import Controller, KeyMapper

log = getLogger(__name__)

SHUTDOWN_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True, slots=True)
class WatchSource:
    """Resources of ``kind`` whose changes enqueue keys through ``mapper``."""

    kind: type[Resource]
    mapper: KeyMapper


@dataclass(frozen=True, slots=True)
class PeriodicTask:
    name: str
    interval: float
    fn: Callable[[threading.Event], object]


@dataclass(slots=True)
class _ControllerEntry:
    controller: Controller
    sources: tuple[WatchSource, ...]
    workers: int


@dataclass(slots=True)
class Supervisor:
    store: ResourceStore
    namespace: str | None = None
    shutdown_timeout: float = SHUTDOWN_TIMEOUT_SECONDS
    _controllers: list[_ControllerEntry] = field(default_factory=list, init=False)
    _periodic: list[PeriodicTask] = field(default_factory=list, init=False)
    _threads: list[threading.Thread] = field(default_factory=list, init=False)

    @property
    def controllers(self) -> list[Controller]:
        return [entry.controller for entry in self._controllers]

    @property
    def periodic_tasks(self) -> list[PeriodicTask]:
        return list(self._periodic)

    def add_controller(
        self, controller: Controller, *sources: WatchSource, workers: int = 1
    ) -> None:
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self._controllers.append(_ControllerEntry(controller, sources, workers))

    def add_periodic(self, task: PeriodicTask) -> None:
        self._periodic.append(task)

    def start(self, stop: threading.Event) -> None:
        for entry in self._controllers:
            for source in entry.sources:
                self._start_thread(
                    f"{entry.controller.name}-watch-{source.kind.KIND}",
                    self._watch,
                    entry.controller,
                    source,
                    stop,
                )
            self._threads.extend(entry.controller.run(stop, workers=entry.workers))

        for task in self._periodic:
            self._start_thread(task.name, self._run_periodic, task, stop)

    def run(self, stop: threading.Event) -> None:
        """Start everything and block until ``stop`` is set, then shut down."""

        self.start(stop)
        log.info(
            "Supervisor running: controllers=%s, periodic=%s",
            len(self._controllers),
            len(self._periodic),
        )
        stop.wait()
        self.shut_down()

    def shut_down(self) -> None:
        log.info("Shutting down")
        for entry in self._controllers:
            entry.controller.shut_down()
        for thread in self._threads:
            thread.join(self.shutdown_timeout)
            if thread.is_alive():
                log.warning("Thread %s did not stop within %ss", thread.name, self.shutdown_timeout)
        self._threads.clear()

    def _start_thread(self, name: str, target: Callable[..., None], *args: object) -> None:
        thread = threading.Thread(target=target, args=args, name=name, daemon=True)
        thread.start()
        self._threads.append(thread)

    def _watch(self, controller: Controller, source: WatchSource, stop: threading.Event) -> None:
        try:
            self.store.watch(
                source.kind,
                controller.handler(source.mapper),
                stop=stop,
                namespace=self.namespace,
            )
        except Exception:
            log.exception("Watch on %s for %s stopped", source.kind.KIND, controller.name)
            stop.set()

    def _run_periodic(self, task: PeriodicTask, stop: threading.Event) -> None:
        run_every(task.interval, lambda: task.fn(stop), stop, name=task.name)
