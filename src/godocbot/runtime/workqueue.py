"""Rate-limited work queue of resource keys.

Semantics follow the controller work queues of Kubernetes clients:

* a key waiting in the queue is held once, however often it is added;
* a key is handed to at most one worker at a time; adding it while it is
  being processed re-queues it once the worker calls ``done``;
* ``add_rate_limited`` delays a key exponentially per consecutive failure,
  ``forget`` resets that count.
"""

from __future__ import annotations

import heapq
import itertools
import threading
import time
from collections import deque
from typing import TYPE_CHECKING, Final

if TYPE_CHECKING:
    from collections.abc import Callable, Hashable

BASE_DELAY_SECONDS: Final = 0.005
MAX_DELAY_SECONDS: Final = 1000.0


class ShutDownError(Exception):
    """Raised by ``get`` once the queue is shut down and drained."""


class WorkQueue[K: Hashable]:
    def __init__(
        self,
        *,
        base_delay: float = BASE_DELAY_SECONDS,
        max_delay: float = MAX_DELAY_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._clock = clock
        self._cond = threading.Condition()
        self._queue: deque[K] = deque()
        self._dirty: set[K] = set()
        self._processing: set[K] = set()
        self._failures: dict[K, int] = {}
        self._delayed: list[tuple[float, int, K]] = []
        self._sequence = itertools.count()
        self._shutting_down = False

    def __len__(self) -> int:
        with self._cond:
            return len(self._queue)

    @property
    def shutting_down(self) -> bool:
        with self._cond:
            return self._shutting_down

    def add(self, key: K) -> None:
        with self._cond:
            self._add_locked(key)

    def add_after(self, key: K, delay: float) -> None:
        if delay <= 0:
            self.add(key)
            return
        with self._cond:
            if self._shutting_down:
                return
            heapq.heappush(self._delayed, (self._clock() + delay, next(self._sequence), key))
            self._cond.notify_all()

    def add_rate_limited(self, key: K) -> None:
        with self._cond:
            failures = self._failures.get(key, 0)
            self._failures[key] = failures + 1
        self.add_after(key, self.backoff(failures))

    def backoff(self, failures: int) -> float:
        """Delay after ``failures`` earlier consecutive failures."""

        # Cap the exponent before it overflows a float.
        return min(self._base_delay * 2 ** min(failures, 64), self._max_delay)

    def failures(self, key: K) -> int:
        with self._cond:
            return self._failures.get(key, 0)

    def forget(self, key: K) -> None:
        with self._cond:
            self._failures.pop(key, None)

    def get(self, timeout: float | None = None) -> K | None:
        """Block until a key is ready and mark it as being processed.

        Returns ``None`` when ``timeout`` elapses first. Raises
        ``ShutDownError`` once the queue was shut down.
        """

        deadline = None if timeout is None else self._clock() + timeout
        with self._cond:
            while True:
                self._promote_due_locked()
                if self._queue:
                    key = self._queue.popleft()
                    self._dirty.discard(key)
                    self._processing.add(key)
                    return key
                if self._shutting_down:
                    raise ShutDownError
                now = self._clock()
                if deadline is not None and deadline <= now:
                    return None
                self._cond.wait(self._next_wait_locked(now, deadline))

    def done(self, key: K) -> None:
        with self._cond:
            self._processing.discard(key)
            if key in self._dirty:
                self._queue.append(key)
                self._cond.notify()

    def shut_down(self) -> None:
        with self._cond:
            self._shutting_down = True
            self._cond.notify_all()

    def _add_locked(self, key: K) -> None:
        if self._shutting_down or key in self._dirty:
            return
        self._dirty.add(key)
        if key in self._processing:
            return
        self._queue.append(key)
        self._cond.notify()

    def _promote_due_locked(self) -> None:
        now = self._clock()
        while self._delayed and self._delayed[0][0] <= now:
            _, _, key = heapq.heappop(self._delayed)
            self._add_locked(key)

    def _next_wait_locked(self, now: float, deadline: float | None) -> float | None:
        waits = [deadline - now] if deadline is not None else []
        if self._delayed:
            waits.append(self._delayed[0][0] - now)
        return max(min(waits), 0.0) if waits else None
