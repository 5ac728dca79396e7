"""Once-per-second elapsed time display."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional


def format_elapsed(seconds: float) -> str:
    total = max(int(seconds), 0)
    hours, rest = divmod(total, 3600)
    mins, secs = divmod(rest, 60)
    return f"{hours:02d}:{mins:02d}:{secs:02d}"


class ElapsedTimer:
    """Calls ``on_tick`` with ``HH:MM:SS`` right away and then every interval.

    ``schedule(delay_ms, callback)`` and ``cancel(job)`` match
    ``tk.Misc.after`` / ``after_cancel``. Each ``start`` bumps a generation
    counter, so a tick that was already queued when ``stop`` ran is dropped.
    """

    def __init__(
        self,
        schedule: Callable[[int, Callable[[], None]], Any],
        cancel: Callable[[Any], None],
        on_tick: Callable[[str], None],
        interval_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._schedule = schedule
        self._cancel = cancel
        self._on_tick = on_tick
        self._interval_ms = interval_ms
        self._clock = clock
        self._lock = threading.Lock()
        self._generation = 0
        self._job: Optional[Any] = None
        self._started_at: Optional[float] = None

    @property
    def running(self) -> bool:
        return self._started_at is not None

    def start(self) -> None:
        self.stop()
        with self._lock:
            self._generation += 1
            generation = self._generation
            self._started_at = self._clock()
        self._tick(generation)

    def stop(self) -> None:
        with self._lock:
            self._generation += 1
            job, self._job = self._job, None
            self._started_at = None
        if job is not None:
            self._cancel(job)

    def _tick(self, generation: int) -> None:
        with self._lock:
            if generation != self._generation or self._started_at is None:
                return
            elapsed = self._clock() - self._started_at
        self._on_tick(format_elapsed(elapsed))
        job = self._schedule(self._interval_ms, lambda: self._tick(generation))
        with self._lock:
            if generation == self._generation:
                self._job = job
                return
        self._cancel(job)
