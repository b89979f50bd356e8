"""
Phase timing for Level-3 calls.

A call runs in three phases (validate, resolve, execute). Timer records the
wall-clock seconds spent in each phase plus the total, and the result lands
in Result.timing.

GPU kernels launch asynchronously. A Timer built with a `sync` callable
invokes it at every phase boundary, so device work is charged to the phase
that queued it rather than to whichever phase happens to block next.
Backends that queue work expose such a callable as `synchronize()`.
"""

import time
from contextlib import contextmanager
from typing import Callable, Iterator


class Timer:
    """
    Per-phase wall-clock timer.

    Usage:
        timer = Timer(sync=backend.synchronize)
        timer.start()
        with timer.section('validate'):
            ...
        with timer.section('execute'):
            ...
        timer.stop()
        timer.result()
        # {'total_seconds': 0.0004, 'validate': 0.0001, 'execute': 0.0003}
    """

    def __init__(self, sync: Callable[[], None] | None = None):
        self._sync = sync
        self._phases: dict[str, float] = {}
        self._t0: float | None = None
        self._total: float | None = None

    def _now(self) -> float:
        if self._sync is not None:
            self._sync()
        return time.perf_counter()

    def start(self) -> None:
        self._t0 = self._now()

    def stop(self) -> None:
        if self._t0 is None:
            raise RuntimeError("Timer.stop() called before start()")
        self._total = self._now() - self._t0

    @contextmanager
    def section(self, name: str) -> Iterator[None]:
        """Time one phase. Re-entering a phase adds to its total."""
        t = self._now()
        try:
            yield
        finally:
            self._phases[name] = self._phases.get(name, 0.0) + self._now() - t

    def result(self) -> dict[str, float]:
        """
        Phase timings keyed by phase name, plus 'total_seconds'.

        Raises:
            RuntimeError: If the timer has not been stopped
        """
        if self._total is None:
            raise RuntimeError("Timer.result() called before stop()")
        return {'total_seconds': self._total, **self._phases}
