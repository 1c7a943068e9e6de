"""
Tests for FrameScheduler

Frame ordering, next-frame semantics, timers, scopes and fault tolerance.
"""

import pytest

from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.models.enums import FramePhase


def test_frames_run_in_request_order(scheduler):
    """Frame callbacks run in request order within a phase"""
    calls = []
    scheduler.request_frame(lambda now: calls.append("a"))
    scheduler.request_frame(lambda now: calls.append("b"))
    scheduler.request_frame(lambda now: calls.append("c"))

    assert scheduler.tick(16) == 3
    assert calls == ["a", "b", "c"]


def test_write_phase_runs_before_read_phase(scheduler):
    calls = []
    scheduler.request_frame(lambda now: calls.append("read"))
    scheduler.request_frame(lambda now: calls.append("write"), FramePhase.WRITE)

    scheduler.tick(16)

    assert calls == ["write", "read"]


def test_frame_requested_during_tick_runs_next_tick(scheduler):
    """A callback re-requesting itself never runs twice in one tick"""
    seen = []

    def step(now):
        seen.append(now)
        if len(seen) < 3:
            scheduler.request_frame(step)

    scheduler.request_frame(step)
    scheduler.tick(10)
    assert seen == [10]
    scheduler.tick(20)
    scheduler.tick(30)
    scheduler.tick(40)
    assert seen == [10, 20, 30]


def test_cancelled_frame_is_noop(scheduler):
    calls = []
    handle = scheduler.request_frame(lambda now: calls.append(now))
    scheduler.cancel_frame(handle)
    scheduler.cancel_frame(handle)  # second cancel is harmless

    scheduler.tick(16)

    assert calls == []
    assert not scheduler.is_pending(handle)


def test_timeout_fires_once_when_due(scheduler):
    calls = []
    scheduler.set_timeout(lambda: calls.append(scheduler.now_ms), 100)

    scheduler.tick(50)
    assert calls == []
    scheduler.tick(100)
    scheduler.tick(200)
    assert calls == [100]


def test_interval_catches_up_missed_periods(scheduler):
    """A late tick fires every missed period instead of dropping them"""
    calls = []
    scheduler.set_interval(lambda: calls.append(1), 50)

    scheduler.tick(220)

    assert len(calls) == 4


def test_interval_rejects_non_positive_period(scheduler):
    with pytest.raises(ValueError):
        scheduler.set_interval(lambda: None, 0)


def test_timer_created_by_timer_waits_for_next_tick(scheduler):
    calls = []

    def first():
        calls.append("first")
        scheduler.set_timeout(lambda: calls.append("second"), 0)

    scheduler.set_timeout(first, 0)
    scheduler.tick(10)
    assert calls == ["first"]
    scheduler.tick(20)
    assert calls == ["first", "second"]


def test_failing_callback_does_not_stop_tick(scheduler):
    calls = []

    def boom(now):
        raise RuntimeError("frame failed")

    scheduler.request_frame(boom)
    scheduler.request_frame(lambda now: calls.append(now))

    scheduler.tick(16)

    assert calls == [16]
    assert scheduler.callback_errors == 1


def test_clock_never_moves_backwards(scheduler):
    scheduler.tick(100)
    scheduler.tick(50)
    assert scheduler.now_ms == 100


def test_advance_ticks_at_frame_interval(scheduler):
    frames_before = scheduler.frames_rendered
    scheduler.advance(100, step_ms=10)
    assert scheduler.now_ms == pytest.approx(100)
    assert scheduler.frames_rendered - frames_before == 10


class TestSchedulerScope:
    """Scopes group handles so a node's continuations can be cancelled together"""

    def test_cancel_all_cancels_frames_and_timers(self, scheduler):
        scope = scheduler.scope()
        calls = []
        scope.request_frame(lambda now: calls.append("frame"))
        scope.set_timeout(lambda: calls.append("timer"), 10)
        scope.set_interval(lambda: calls.append("interval"), 10)

        scope.cancel_all()
        scheduler.advance(100)

        assert calls == []
        assert scheduler.pending_frames() == 0
        assert scheduler.pending_timers() == 0

    def test_closed_scope_ignores_new_requests(self, scheduler):
        scope = scheduler.scope()
        scope.close()

        assert scope.request_frame(lambda now: None) is None
        assert scope.set_timeout(lambda: None, 10) is None
        assert scheduler.pending_frames() == 0

    def test_errors_route_to_handler(self, scheduler):
        errors = []
        scope = scheduler.scope(on_error=errors.append)

        def boom(now):
            raise ValueError("bad step")

        scope.request_frame(boom)
        scheduler.tick(16)

        assert len(errors) == 1
        assert isinstance(errors[0], ValueError)
        assert scheduler.callback_errors == 0

    def test_pending_counts_live_handles(self, scheduler):
        scope = scheduler.scope()
        scope.request_frame(lambda now: None)
        scope.set_timeout(lambda: None, 1000)
        assert scope.pending() == 2

        scheduler.tick(16)
        assert scope.pending() == 1


@pytest.mark.asyncio
async def test_render_loop_drives_ticks():
    """start()/stop() run tick() from an asyncio task at the target FPS"""
    import asyncio

    scheduler = FrameScheduler(fps=120)
    seen = []
    scheduler.request_frame(lambda now: seen.append(now))

    await scheduler.start()
    await asyncio.sleep(0.1)
    await scheduler.stop()

    assert seen
    assert scheduler.frames_rendered > 0
    assert not scheduler.running
    assert scheduler.render_task is None


@pytest.mark.asyncio
async def test_paused_loop_steps_single_frame():
    import asyncio

    scheduler = FrameScheduler(fps=120)
    scheduler.pause()
    await scheduler.start()
    await asyncio.sleep(0.05)
    assert scheduler.frames_rendered == 0

    scheduler.step_frame()
    await asyncio.sleep(0.05)
    await scheduler.stop()

    assert scheduler.frames_rendered == 1
