"""Controller runtime: work queues, reconcile loops, tickers and supervision."""

from __future__ import annotations

from .controller import Controller, Reconciler, enqueue_object, enqueue_owner
from .periodic import run_every
from .supervisor import PeriodicTask, Supervisor, WatchSource
from .workqueue import ShutDownError, WorkQueue

__all__ = [
    "Controller",
    "PeriodicTask",
    "Reconciler",
    "ShutDownError",
    "Supervisor",
    "WatchSource",
    "WorkQueue",
    "enqueue_object",
    "enqueue_owner",
    "run_every",
]
