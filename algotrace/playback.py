"""Playback controller: steps through a Trace on a timer or by hand.

The controller owns a cursor in ``0..N`` (0 means nothing revealed yet),
a bounded rolling log of revealed step descriptions, and at most one live
timer.  A watermark records the highest step index already logged, so
re-processing the same cursor position never duplicates a log entry.
Every time a timer is armed or cancelled the generation counter moves on;
a tick carrying an older generation is ignored.
"""

from __future__ import annotations

import logging
from collections import deque

from .playback_types import LogEntry, PlaybackConfig, PlaybackMode, PlaybackState
from .scheduler import Scheduler, TimerHandle
from .trace_types import Step, Trace

logger = logging.getLogger(__name__)


class PlaybackController:
    def __init__(
        self,
        trace: Trace,
        scheduler: Scheduler,
        config: PlaybackConfig | None = None,
    ):
        self._scheduler = scheduler
        self._config = config or PlaybackConfig()
        self._trace = trace
        self._mode = PlaybackMode.IDLE
        self._cursor = 0
        self._watermark = 0
        self._log: deque[LogEntry] = deque(maxlen=self._config.log_capacity)
        self._timer: TimerHandle | None = None
        self._generation = 0

    # ── observers ────────────────────────────────────────────────

    @property
    def trace(self) -> Trace:
        return self._trace

    @property
    def config(self) -> PlaybackConfig:
        return self._config

    @property
    def mode(self) -> PlaybackMode:
        return self._mode

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def total(self) -> int:
        return len(self._trace)

    @property
    def current_step(self) -> Step | None:
        """The most recently revealed step, or None before the first."""
        if self._cursor == 0:
            return None
        return self._trace[self._cursor - 1]

    @property
    def preview_step(self) -> Step | None:
        """What the view shows: the current step, else the opening step."""
        return self.current_step or self._trace[0]

    @property
    def log(self) -> list[LogEntry]:
        return list(self._log)

    @property
    def progress(self) -> float:
        return self._cursor / self.total

    @property
    def is_complete(self) -> bool:
        return self._cursor >= self.total

    @property
    def can_step(self) -> bool:
        return self._cursor < self.total

    @property
    def has_timer(self) -> bool:
        return self._timer is not None

    @property
    def state(self) -> PlaybackState:
        return PlaybackState(
            mode=self._mode,
            cursor=self._cursor,
            total=self.total,
            watermark=self._watermark,
            log=tuple(self._log),
        )

    # ── commands ─────────────────────────────────────────────────

    def play(self) -> None:
        if self._mode == PlaybackMode.PLAYING:
            logger.debug("play() ignored: already playing")
            return
        if self._mode == PlaybackMode.FINISHED:
            self._rewind()
        self.cancel_timer()
        self._set_mode(PlaybackMode.PLAYING)
        self._arm()

    def pause(self) -> None:
        if self._mode != PlaybackMode.PLAYING:
            logger.debug("pause() ignored in mode %s", self._mode.value)
            return
        self.cancel_timer()
        self._set_mode(PlaybackMode.PAUSED)

    def toggle(self) -> None:
        if self._mode == PlaybackMode.PLAYING:
            self.pause()
        else:
            self.play()

    def step(self) -> bool:
        """Reveal the next step by hand; returns False once at the end.

        While playing, the timer restarts from the new cursor and play
        continues; otherwise playback is left paused.
        """
        if not self.can_step:
            logger.debug("step() ignored: cursor already at %d", self._cursor)
            return False
        if self._mode == PlaybackMode.PLAYING:
            self.cancel_timer()
        else:
            self._set_mode(PlaybackMode.PAUSED)
        self._advance()
        if self._mode == PlaybackMode.PLAYING:
            self._arm()
        return True

    def reset(self) -> None:
        self.cancel_timer()
        self._rewind()
        self._set_mode(PlaybackMode.IDLE)

    def load(self, trace: Trace) -> None:
        """Swap in a new trace and return to Idle."""
        self.cancel_timer()
        self._trace = trace
        self._rewind()
        self._set_mode(PlaybackMode.IDLE)
        logger.debug("Loaded %s trace with %d steps", trace.algorithm, len(trace))

    def refresh(self) -> None:
        """Re-process the step under the cursor, e.g. after a re-render."""
        self._process(self._cursor)

    def cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self._generation += 1

    # ── internals ────────────────────────────────────────────────

    def _set_mode(self, mode: PlaybackMode) -> None:
        if mode != self._mode:
            logger.debug("Playback %s -> %s", self._mode.value, mode.value)
        self._mode = mode

    def _rewind(self) -> None:
        self._cursor = 0
        self._watermark = 0
        self._log.clear()

    def _arm(self) -> None:
        self._generation += 1
        generation = self._generation
        self._timer = self._scheduler.call_later(
            self._config.delay_seconds, lambda: self._on_tick(generation)
        )

    def _on_tick(self, generation: int) -> None:
        if generation != self._generation or self._mode != PlaybackMode.PLAYING:
            logger.debug("Ignoring stale tick (generation %d)", generation)
            return
        self._timer = None
        self._advance()
        if self._mode == PlaybackMode.PLAYING:
            self._arm()

    def _advance(self) -> None:
        self._cursor += 1
        logger.debug("Cursor -> %d/%d", self._cursor, self.total)
        self._process(self._cursor)
        if self.is_complete:
            self.cancel_timer()
            self._set_mode(PlaybackMode.FINISHED)

    def _process(self, position: int) -> None:
        if position == 0 or position <= self._watermark:
            return
        step = self._trace[position - 1]
        self._log.append(LogEntry(step.index, step.kind, step.description))
        self._watermark = position
