from __future__ import annotations

import time
from threading import BoundedSemaphore, Lock
from typing import Callable, TypeVar

T = TypeVar("T")


class RateLimitedPool:
    """
    Bounded admission for calls to one upstream service.

    At most `max_concurrent` units run at once across all threads sharing the pool.
    When `min_interval_seconds` is set, unit start times are spaced at least that far
    apart pool-wide (a fixed-interval gate for services with a requests-per-second cap).
    """

    def __init__(
        self,
        name: str,
        *,
        max_concurrent: int,
        min_interval_seconds: float = 0.0,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if int(max_concurrent) < 1:
            raise ValueError(f"Pool {name!r} needs max_concurrent >= 1 (got {max_concurrent!r}).")
        if float(min_interval_seconds) < 0:
            raise ValueError(f"Pool {name!r} needs min_interval_seconds >= 0 (got {min_interval_seconds!r}).")

        self.name = name
        self.max_concurrent = int(max_concurrent)
        self.min_interval_seconds = float(min_interval_seconds)
        self._clock = clock
        self._sleep = sleep
        self._slots = BoundedSemaphore(self.max_concurrent)
        self._state_lock = Lock()
        self._in_flight = 0
        self._next_start: float | None = None

    def __repr__(self) -> str:
        return (
            f"RateLimitedPool(name={self.name!r}, max_concurrent={self.max_concurrent}, "
            f"min_interval_seconds={self.min_interval_seconds})"
        )

    @property
    def in_flight(self) -> int:
        with self._state_lock:
            return self._in_flight

    def _wait_for_interval_gate(self) -> None:
        if self.min_interval_seconds <= 0:
            return
        with self._state_lock:
            now = self._clock()
            start_at = now if self._next_start is None else max(now, self._next_start)
            self._next_start = start_at + self.min_interval_seconds
        delay = start_at - now
        if delay > 0:
            self._sleep(delay)

    def run(self, fn: Callable[..., T], /, *args, **kwargs) -> T:
        """Run `fn(*args, **kwargs)` once a slot is free; its result or exception passes through."""

        with self._slots:
            with self._state_lock:
                self._in_flight += 1
            try:
                self._wait_for_interval_gate()
                return fn(*args, **kwargs)
            finally:
                with self._state_lock:
                    self._in_flight -= 1
