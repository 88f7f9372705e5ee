"""Cooperative fixed-interval ticker."""

from __future__ import annotations

import time
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import threading
    from collections.abc import Callable

log = getLogger(__name__)


def run_every(
    interval: float,
    fn: Callable[[], object],
    stop: threading.Event,
    *,
    name: str = "periodic",
    clock: Callable[[], float] = time.monotonic,
) -> int:
    """Call ``fn`` now and then once per ``interval`` until ``stop`` is set.

    Runs never overlap; ticks that pass while a run is still going are skipped.
    Exceptions are logged and do not end the loop. Returns the number of runs.
    """

    if interval <= 0:
        raise ValueError(f"interval must be positive, got {interval}")

    runs = 0
    next_at = clock()
    while not stop.is_set():
        try:
            fn()
        except Exception:
            log.exception("%s: run failed", name)
        runs += 1
        now = clock()
        next_at += interval
        if next_at <= now:
            skipped = int((now - next_at) // interval) + 1
            log.warning(
                "%s: run took longer than %ss, skipping %s tick(s)", name, interval, skipped
            )
            next_at += skipped * interval
        stop.wait(next_at - now)
    return runs
