from __future__ import annotations

import threading
import time
from collections.abc import Callable  # noqa: TC003
from dataclasses import dataclass, field

from godocbot.domain.model import ObjectKey, TrackedPullRequest
from godocbot.runtime import Controller, PeriodicTask, Supervisor, WatchSource, enqueue_object
from tests.helpers.store import InMemoryResourceStore


@dataclass
class RecordingReconciler:
    calls: list[ObjectKey] = field(default_factory=list)

    def reconcile(self, key: ObjectKey) -> None:
        self.calls.append(key)


def _wait_for(condition: Callable[[], bool], timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


def test_supervisor_feeds_watch_events_to_controllers(store: InMemoryResourceStore) -> None:
    existing = store.add_pull_request("existing", "https://github.com/acme/widgets/pull/1")
    reconciler = RecordingReconciler()
    supervisor = Supervisor(store=store)
    supervisor.add_controller(
        Controller("recorder", reconciler),
        WatchSource(TrackedPullRequest, enqueue_object),
    )
    stop = threading.Event()

    supervisor.start(stop)
    try:
        assert _wait_for(lambda: existing in reconciler.calls)
        added = store.add_pull_request("added", "https://github.com/acme/widgets/pull/2")
        assert _wait_for(lambda: added in reconciler.calls)
    finally:
        stop.set()
        supervisor.shut_down()


def test_supervisor_runs_periodic_tasks(store: InMemoryResourceStore) -> None:
    ticks: list[bool] = []
    supervisor = Supervisor(store=store)
    supervisor.add_periodic(
        PeriodicTask(name="ticker", interval=0.01, fn=lambda stop: ticks.append(stop.is_set()))
    )
    stop = threading.Event()

    supervisor.start(stop)
    try:
        assert _wait_for(lambda: len(ticks) >= 3)
    finally:
        stop.set()
        supervisor.shut_down()

    assert not any(ticks[:3])


def test_run_returns_once_stopped(store: InMemoryResourceStore) -> None:
    supervisor = Supervisor(store=store)
    supervisor.add_controller(
        Controller("recorder", RecordingReconciler()),
        WatchSource(TrackedPullRequest, enqueue_object),
    )
    stop = threading.Event()
    runner = threading.Thread(target=supervisor.run, args=(stop,))

    runner.start()
    stop.set()
    runner.join(10)

    assert not runner.is_alive()
