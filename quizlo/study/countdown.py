"""
Cancellable periodic callbacks for the exam countdown.

A Scheduler hands out ScheduledTask handles; a Countdown is a context
manager that owns exactly one task and cancels it on exit, so leaving
the running exam state on any path stops the ticking.
"""
from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Protocol

from loguru import logger


class ScheduledTask(Protocol):
    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask: ...


class _ThreadTask:
    """Periodic callback on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._stop = threading.Event()
        self._thread = threading.Thread(target=self._run, name="quizlo-countdown", daemon=True)

    def start(self) -> "_ThreadTask":
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception("Countdown callback failed; stopping timer")
                self._stop.set()

    def cancel(self) -> None:
        self._stop.set()

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()


class ThreadingScheduler:
    """Real-time scheduler backed by one thread per task."""

    def every(self, interval: float, callback: Callable[[], None]) -> ScheduledTask:
        return _ThreadTask(interval, callback).start()


class Countdown:
    """
    Scoped ownership of one periodic tick.

    Usage:
        with Countdown(scheduler, 1.0, on_tick):
            ...  # ticking while inside
    """

    def __init__(self, scheduler: Scheduler, interval: float, on_tick: Callable[[], None]):
        self.scheduler = scheduler
        self.interval = interval
        self.on_tick = on_tick
        self._task: ScheduledTask | None = None

    @property
    def active(self) -> bool:
        return self._task is not None and not self._task.cancelled

    def __enter__(self) -> "Countdown":
        self._task = self.scheduler.every(self.interval, self.on_tick)
        logger.debug(f"Countdown started ({self.interval}s interval)")
        return self

    def __exit__(self, *exc_info) -> None:
        self.release()

    def release(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None
            logger.debug("Countdown cancelled")
