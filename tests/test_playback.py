"""Tests for algotrace.playback."""

from __future__ import annotations

import pytest

from algotrace.api import build_trace
from algotrace.playback import PlaybackController
from algotrace.playback_types import PlaybackConfig, PlaybackMode
from algotrace.scheduler import ManualScheduler
from algotrace.trace_types import Step, Trace


def _trace(n: int, algorithm: str = "fake") -> Trace:
    steps = [
        Step(index=i, kind="tick", description=f"{algorithm} step {i}")
        for i in range(1, n + 1)
    ]
    return Trace(algorithm=algorithm, steps=tuple(steps))


def _controller(n: int = 5, delay_ms: int = 1000, log_capacity: int = 14):
    scheduler = ManualScheduler()
    config = PlaybackConfig(delay_ms=delay_ms, log_capacity=log_capacity)
    return PlaybackController(_trace(n), scheduler, config), scheduler


class TestPlaybackConfig:
    def test_defaults_are_valid(self):
        config = PlaybackConfig()
        assert 800 <= config.delay_ms <= 2000
        assert 14 <= config.log_capacity <= 18

    @pytest.mark.parametrize("delay_ms", [799, 2001])
    def test_delay_range(self, delay_ms):
        with pytest.raises(ValueError):
            PlaybackConfig(delay_ms=delay_ms)

    @pytest.mark.parametrize("capacity", [13, 19])
    def test_log_capacity_range(self, capacity):
        with pytest.raises(ValueError):
            PlaybackConfig(log_capacity=capacity)


class TestInitialState:
    def test_starts_idle_at_zero(self):
        controller, scheduler = _controller()
        assert controller.mode == PlaybackMode.IDLE
        assert controller.cursor == 0
        assert controller.current_step is None
        assert controller.preview_step.index == 1
        assert controller.log == []
        assert controller.progress == 0
        assert controller.can_step
        assert not controller.is_complete
        assert scheduler.pending == 0


class TestPlay:
    def test_ticks_advance_one_step_per_delay(self):
        controller, scheduler = _controller(n=5, delay_ms=1000)
        controller.play()
        assert controller.mode == PlaybackMode.PLAYING
        assert scheduler.pending == 1

        scheduler.advance(0.5)
        assert controller.cursor == 0
        scheduler.advance(0.5)
        assert controller.cursor == 1
        assert controller.current_step.index == 1
        scheduler.advance(2.0)
        assert controller.cursor == 3

    def test_reaching_the_end_finishes_and_cancels_timer(self):
        controller, scheduler = _controller(n=3)
        controller.play()
        scheduler.advance(10.0)
        assert controller.cursor == 3
        assert controller.mode == PlaybackMode.FINISHED
        assert controller.is_complete
        assert controller.progress == 1
        assert scheduler.pending == 0
        assert not controller.has_timer

    def test_at_most_one_live_timer(self):
        controller, scheduler = _controller(n=10)
        controller.play()
        controller.play()
        controller.toggle()
        controller.toggle()
        assert scheduler.pending == 1
        scheduler.advance(3.0)
        assert scheduler.pending == 1
        assert controller.cursor == 3

    def test_play_after_finish_restarts(self):
        controller, scheduler = _controller(n=2)
        controller.play()
        scheduler.advance(5.0)
        assert controller.mode == PlaybackMode.FINISHED

        controller.play()
        assert controller.cursor == 0
        assert controller.log == []
        assert controller.mode == PlaybackMode.PLAYING
        scheduler.advance(1.0)
        assert controller.cursor == 1
        assert [e.index for e in controller.log] == [1]


class TestPause:
    def test_pause_keeps_cursor_and_stops_ticks(self):
        controller, scheduler = _controller(n=5)
        controller.play()
        scheduler.advance(2.0)
        controller.pause()
        assert controller.mode == PlaybackMode.PAUSED
        assert scheduler.pending == 0
        scheduler.advance(10.0)
        assert controller.cursor == 2

    def test_pause_when_not_playing_is_noop(self):
        controller, _ = _controller()
        controller.pause()
        assert controller.mode == PlaybackMode.IDLE

    def test_resume_after_pause(self):
        controller, scheduler = _controller(n=5)
        controller.play()
        scheduler.advance(1.0)
        controller.pause()
        controller.play()
        scheduler.advance(1.0)
        assert controller.cursor == 2


class TestStep:
    def test_manual_step(self):
        controller, _ = _controller(n=3)
        assert controller.step()
        assert controller.cursor == 1
        assert controller.mode == PlaybackMode.PAUSED
        assert [e.description for e in controller.log] == ["fake step 1"]

    def test_step_never_passes_the_end(self):
        controller, _ = _controller(n=2)
        assert controller.step()
        assert controller.step()
        assert controller.mode == PlaybackMode.FINISHED
        assert not controller.step()
        assert controller.cursor == 2
        assert not controller.can_step

    def test_step_while_playing_keeps_playing(self):
        controller, scheduler = _controller(n=5, delay_ms=1000)
        controller.play()
        scheduler.advance(0.5)
        controller.step()
        assert controller.mode == PlaybackMode.PLAYING
        assert controller.cursor == 1
        assert scheduler.pending == 1
        # the timer restarts from the manual step
        scheduler.advance(0.5)
        assert controller.cursor == 1
        scheduler.advance(0.5)
        assert controller.cursor == 2
        assert [e.index for e in controller.log] == [1, 2]

    def test_step_onto_last_step_while_playing_finishes(self):
        controller, scheduler = _controller(n=2)
        controller.play()
        scheduler.advance(1.0)
        controller.step()
        assert controller.mode == PlaybackMode.FINISHED
        assert scheduler.pending == 0
        assert not controller.has_timer

    def test_cursor_is_monotonic(self):
        controller, scheduler = _controller(n=8)
        seen = [controller.cursor]
        controller.play()
        for _ in range(3):
            scheduler.advance(1.0)
            seen.append(controller.cursor)
        controller.pause()
        controller.step()
        seen.append(controller.cursor)
        controller.toggle()
        scheduler.advance(20.0)
        seen.append(controller.cursor)
        assert seen == sorted(seen)
        assert seen[-1] == 8


class TestLog:
    def test_refresh_never_duplicates_entries(self):
        controller, _ = _controller(n=5)
        controller.step()
        controller.step()
        for _ in range(100):
            controller.refresh()
        assert [e.index for e in controller.log] == [1, 2]

    def test_refresh_at_zero_is_noop(self):
        controller, _ = _controller()
        controller.refresh()
        assert controller.log == []

    def test_log_is_bounded(self):
        controller, scheduler = _controller(n=30, log_capacity=14)
        controller.play()
        scheduler.advance(30.0)
        log = controller.log
        assert len(log) == 14
        assert [e.index for e in log] == list(range(17, 31))

    def test_log_entries_carry_kind(self):
        controller, _ = _controller()
        controller.step()
        entry = controller.log[0]
        assert (entry.index, entry.kind, entry.description) == (1, "tick", "fake step 1")


class TestResetAndLoad:
    def test_reset_clears_everything(self):
        controller, scheduler = _controller(n=5)
        controller.play()
        scheduler.advance(2.0)
        controller.reset()
        assert controller.mode == PlaybackMode.IDLE
        assert controller.cursor == 0
        assert controller.log == []
        assert controller.state.watermark == 0
        assert scheduler.pending == 0

    def test_log_refills_after_reset(self):
        controller, _ = _controller(n=3)
        controller.step()
        controller.reset()
        controller.step()
        assert [e.index for e in controller.log] == [1]

    def test_load_cancels_timer_and_installs_trace(self):
        controller, scheduler = _controller(n=5)
        controller.play()
        scheduler.advance(2.0)
        replacement = _trace(3, algorithm="other")
        controller.load(replacement)
        assert controller.trace is replacement
        assert controller.mode == PlaybackMode.IDLE
        assert controller.cursor == 0
        assert scheduler.pending == 0

    def test_stale_tick_is_ignored(self):
        controller, scheduler = _controller(n=5)
        controller.play()
        scheduler.advance(1.0)
        # grab the live tick, then replace the trace underneath it
        stale = scheduler._timers[0].callback
        controller.load(_trace(4, algorithm="other"))
        stale()
        assert controller.cursor == 0
        assert controller.log == []


class TestStateView:
    def test_state_snapshot(self):
        controller, _ = _controller(n=4)
        controller.step()
        state = controller.state
        assert state.mode == PlaybackMode.PAUSED
        assert state.cursor == 1
        assert state.total == 4
        assert state.to_dict()["log"] == [
            {"index": 1, "kind": "tick", "description": "fake step 1"}
        ]

    def test_plays_a_real_trace(self):
        trace = build_trace("three-sum")
        scheduler = ManualScheduler()
        controller = PlaybackController(trace, scheduler, PlaybackConfig(delay_ms=1700))
        controller.play()
        scheduler.run_all()
        assert controller.mode == PlaybackMode.FINISHED
        assert controller.current_step.snapshot["answer"] == trace.answer
        assert len(controller.log) == min(len(trace), 18)
