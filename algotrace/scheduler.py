"""Cancellable delayed-callback schedulers used by playback."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Callable

logger = logging.getLogger(__name__)


class TimerHandle(ABC):
    """A pending callback that can be cancelled before it fires."""

    @abstractmethod
    def cancel(self) -> None: ...

    @abstractmethod
    def cancelled(self) -> bool: ...


class Scheduler(ABC):
    """Abstract source of one-shot delayed callbacks."""

    @abstractmethod
    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> TimerHandle:
        """Arrange for *callback* to run once after *delay_seconds*."""
        ...


class _AsyncioTimer(TimerHandle):
    def __init__(self, handle: asyncio.TimerHandle):
        self._handle = handle

    def cancel(self) -> None:
        self._handle.cancel()

    def cancelled(self) -> bool:
        return self._handle.cancelled()


class AsyncioScheduler(Scheduler):
    """Wraps ``loop.call_later``; callbacks run on the event loop thread.

    With no loop injected, the running loop is looked up at call time, so
    the scheduler must be used from inside a coroutine or loop callback.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return _AsyncioTimer(loop.call_later(delay_seconds, callback))


class _ManualTimer(TimerHandle):
    def __init__(self, due: float, sequence: int, callback: Callable[[], None]):
        self.due = due
        self.sequence = sequence
        self.callback = callback
        self._cancelled = False
        self.fired = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def live(self) -> bool:
        return not (self._cancelled or self.fired)


class ManualScheduler(Scheduler):
    """Deterministic virtual clock for tests and headless replay.

    Nothing fires until ``advance`` moves the clock; timers then run in
    due-time order (ties in scheduling order), including timers scheduled
    by callbacks that fall inside the advanced window.
    """

    def __init__(self):
        self.now: float = 0.0
        self._timers: list[_ManualTimer] = []
        self._sequence = 0

    def call_later(
        self, delay_seconds: float, callback: Callable[[], None]
    ) -> TimerHandle:
        self._sequence += 1
        timer = _ManualTimer(self.now + max(delay_seconds, 0.0), self._sequence, callback)
        self._timers.append(timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are neither cancelled nor fired."""
        return sum(1 for t in self._timers if t.live)

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing every timer that comes due.

        Returns the number of callbacks run.
        """
        target = self.now + seconds
        fired = 0
        while True:
            due = [t for t in self._timers if t.live and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.sequence))
            self.now = timer.due
            timer.fired = True
            timer.callback()
            fired += 1
        self.now = target
        self._timers = [t for t in self._timers if t.live]
        logger.debug("Clock advanced to %.3fs, %d callback(s) fired", self.now, fired)
        return fired

    def run_all(self, limit: int = 10_000) -> int:
        """Fire timers until none remain (or *limit* callbacks have run)."""
        fired = 0
        while fired < limit:
            live = [t for t in self._timers if t.live]
            if not live:
                break
            fired += self.advance(min(t.due for t in live) - self.now)
        return fired
