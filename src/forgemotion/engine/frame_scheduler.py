"""
FrameScheduler - cooperative frame-driven scheduling on a single thread

Architecture:
  - request_frame() queues a callback for the next rendering frame
    (requestAnimationFrame equivalent)
  - set_timeout() / set_interval() queue real-time timers
  - tick(now_ms) advances the clock: due timers run first, then every frame
    callback that was requested before the tick, ordered by FramePhase and
    request order
  - start()/stop() drive tick() from an asyncio render loop at the target FPS

Frame callbacks requested while a tick is running land in the next tick, so
continuous animations re-schedule themselves one frame at a time.
Cancelled handles become no-ops. A failing callback is logged and does not
stop the rest of the tick.
"""

from __future__ import annotations

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Set

from forgemotion.models.enums import FramePhase, LogCategory
from forgemotion.utils.logger import get_logger

log = get_logger().for_category(LogCategory.RENDER_ENGINE)

FrameCallback = Callable[[float], None]
TimerCallback = Callable[[], None]
ErrorHandler = Callable[[BaseException], None]


@dataclass
class _FrameRequest:
    handle: int
    callback: FrameCallback
    phase: FramePhase


@dataclass
class _Timer:
    handle: int
    callback: TimerCallback
    due_ms: float
    interval_ms: Optional[float] = None


class FrameScheduler:
    """
    Frame and timer scheduler driven by an explicit clock.

    Manages:
    - Pending frame callbacks (next-frame semantics)
    - One-shot and interval timers
    - Scopes that cancel everything they scheduled in one call
    - Render loop lifecycle (pause / step / FPS control)
    - Metrics
    """

    def __init__(self, fps: int = 60, clock: Optional[Callable[[], float]] = None):
        """
        Initialize scheduler.

        Args:
            fps: Target render frequency (1-240, default 60)
            clock: Returns current time in seconds; defaults to time.perf_counter
        """
        self.fps = max(1, min(fps, 240))
        self._clock = clock or time.perf_counter
        self._origin = self._clock()

        self._last_handle = 0
        self._frames: Dict[int, _FrameRequest] = {}
        self._timers: Dict[int, _Timer] = {}

        self.now_ms: float = 0.0
        self._in_tick = False

        # Runtime state
        self.running = False
        self.paused = False
        self.step_requested = False
        self.render_task: Optional[asyncio.Task] = None

        # Metrics
        self.frames_rendered = 0
        self.callbacks_run = 0
        self.callback_errors = 0
        self.frame_times: Deque[float] = deque(maxlen=300)

        log.debug("FrameScheduler initialized", fps=self.fps)

    @property
    def frame_interval_ms(self) -> float:
        return 1000.0 / self.fps

    def clock_ms(self) -> float:
        """Milliseconds since the scheduler was created, from the injected clock"""
        return (self._clock() - self._origin) * 1000.0

    # === Frame API ===

    def request_frame(self, callback: FrameCallback, phase: FramePhase = FramePhase.READ) -> int:
        """Run callback(now_ms) on the next frame. Returns a cancellable handle."""
        handle = self._next_handle()
        self._frames[handle] = _FrameRequest(handle, callback, phase)
        return handle

    def cancel_frame(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._frames.pop(handle, None)

    # === Timer API ===

    def set_timeout(self, callback: TimerCallback, delay_ms: float) -> int:
        handle = self._next_handle()
        self._timers[handle] = _Timer(handle, callback, self.now_ms + max(0.0, delay_ms))
        return handle

    def set_interval(self, callback: TimerCallback, interval_ms: float) -> int:
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")
        handle = self._next_handle()
        self._timers[handle] = _Timer(handle, callback, self.now_ms + interval_ms, interval_ms)
        return handle

    def clear_timer(self, handle: Optional[int]) -> None:
        if handle is not None:
            self._timers.pop(handle, None)

    def cancel(self, handle: Optional[int]) -> None:
        """Cancel a frame request or timer, whichever the handle refers to"""
        self.cancel_frame(handle)
        self.clear_timer(handle)

    def is_pending(self, handle: Optional[int]) -> bool:
        return handle is not None and (handle in self._frames or handle in self._timers)

    def pending_frames(self) -> int:
        return len(self._frames)

    def pending_timers(self) -> int:
        return len(self._timers)

    def scope(self, on_error: Optional[ErrorHandler] = None) -> "SchedulerScope":
        """Create a scope that tracks (and can cancel) everything scheduled through it"""
        return SchedulerScope(self, on_error)

    # === Tick ===

    def tick(self, now_ms: Optional[float] = None) -> int:
        """
        Advance to now_ms and run everything that is due.

        Args:
            now_ms: Frame timestamp; defaults to the injected clock

        Returns:
            Number of callbacks executed
        """
        if self._in_tick:
            raise RuntimeError("FrameScheduler.tick() is not re-entrant")

        if now_ms is None:
            now_ms = self.clock_ms()
        if now_ms < self.now_ms:
            now_ms = self.now_ms

        self._in_tick = True
        executed = 0
        try:
            self.now_ms = now_ms
            executed += self._run_timers(now_ms)

            # Snapshot: callbacks requested during this pass wait for the next tick
            batch: List[_FrameRequest] = sorted(
                self._frames.values(), key=lambda r: (r.phase.value, r.handle)
            )
            for request in batch:
                if request.handle not in self._frames:
                    continue  # cancelled by an earlier callback in this tick
                del self._frames[request.handle]
                self._invoke(request.callback, now_ms)
                executed += 1
        finally:
            self._in_tick = False

        self.frames_rendered += 1
        self.callbacks_run += executed
        self.frame_times.append(now_ms)
        return executed

    def advance(self, duration_ms: float, step_ms: Optional[float] = None) -> int:
        """Tick repeatedly at the frame interval until duration_ms has elapsed"""
        step = step_ms or self.frame_interval_ms
        target = self.now_ms + duration_ms
        executed = 0
        while self.now_ms + step <= target + 1e-9:
            executed += self.tick(self.now_ms + step)
        if self.now_ms < target:
            executed += self.tick(target)
        return executed

    def _next_handle(self) -> int:
        self._last_handle += 1
        return self._last_handle

    def _run_timers(self, now_ms: float) -> int:
        # Timers created while this pass runs wait for the next tick
        ceiling = self._last_handle
        executed = 0
        while True:
            due = [t for t in self._timers.values() if t.due_ms <= now_ms and t.handle <= ceiling]
            if not due:
                return executed
            timer = min(due, key=lambda t: (t.due_ms, t.handle))
            if timer.interval_ms is None:
                del self._timers[timer.handle]
            else:
                # Catch up one period at a time so no firing is skipped
                timer.due_ms += timer.interval_ms
            self._invoke(timer.callback)
            executed += 1

    def _invoke(self, callback: Callable, *args) -> None:
        try:
            callback(*args)
        except Exception as e:
            self.callback_errors += 1
            log.error(
                "Scheduled callback failed",
                callback=getattr(callback, "__qualname__", repr(callback)),
                error=f"{type(e).__name__}: {e}",
            )

    # === Control API ===

    def pause(self) -> None: self.paused = True

    def resume(self) -> None: self.paused = False

    def step_frame(self) -> None: self.step_requested = True

    def set_fps(self, fps: int) -> None:
        """Change FPS at runtime."""
        self.fps = max(1, min(fps, 240))
        log.info(f"FrameScheduler FPS set to {self.fps}")

    # === Lifecycle ===

    async def start(self) -> None:
        """Start the render loop."""
        if self.running:
            log.warn("FrameScheduler already running")
            return

        self.running = True
        self.render_task = asyncio.create_task(self._render_loop())
        log.info(f"FrameScheduler render loop started @ {self.fps} FPS")

    async def stop(self) -> None:
        """Stop the render loop."""
        if not self.running:
            return
        self.running = False
        if self.render_task:
            self.render_task.cancel()
            try:
                await self.render_task
            except asyncio.CancelledError:
                pass
            self.render_task = None

        log.info(
            "FrameScheduler stopped",
            frames_rendered=self.frames_rendered,
            callback_errors=self.callback_errors,
        )

    async def _render_loop(self) -> None:
        """Main render loop @ target FPS."""
        while self.running:
            if self.paused and not self.step_requested:
                await asyncio.sleep(0.01)
                continue

            started = self._clock()
            self.tick()
            self.step_requested = False

            elapsed = self._clock() - started
            await asyncio.sleep(max(0.0, 1.0 / self.fps - elapsed))

    # === Metrics ===

    def get_actual_fps(self) -> float:
        """Get measured FPS over recent frames."""
        if len(self.frame_times) < 2:
            return 0.0
        duration = (self.frame_times[-1] - self.frame_times[0]) / 1000.0
        if duration <= 0:
            return 0.0
        return (len(self.frame_times) - 1) / duration

    def get_metrics(self) -> Dict:
        return {
            "fps_target": self.fps,
            "fps_actual": self.get_actual_fps(),
            "frames_rendered": self.frames_rendered,
            "callbacks_run": self.callbacks_run,
            "callback_errors": self.callback_errors,
            "pending_frames": len(self._frames),
            "pending_timers": len(self._timers),
        }


class SchedulerScope:
    """
    Handle group over a FrameScheduler.

    Everything scheduled through a scope is cancelled by cancel_all(); once
    closed, further scheduling is ignored and returns None. Exceptions raised
    by scoped callbacks go to on_error instead of the scheduler's log.
    """

    def __init__(self, scheduler: FrameScheduler, on_error: Optional[ErrorHandler] = None):
        self.scheduler = scheduler
        self.on_error = on_error
        self._handles: Set[int] = set()
        self.closed = False

    @property
    def now_ms(self) -> float:
        return self.scheduler.now_ms

    def _wrap(self, handle_ref: List[int], callback: Callable) -> Callable:
        def run(*args):
            if handle_ref:
                self._handles.discard(handle_ref[0])
            if self.closed:
                return
            try:
                callback(*args)
            except Exception as e:
                if self.on_error is None:
                    raise
                self.on_error(e)
        run.__qualname__ = getattr(callback, "__qualname__", "scoped")
        return run

    def request_frame(self, callback: FrameCallback, phase: FramePhase = FramePhase.READ) -> Optional[int]:
        if self.closed:
            return None
        ref: List[int] = []
        handle = self.scheduler.request_frame(self._wrap(ref, callback), phase)
        ref.append(handle)
        self._handles.add(handle)
        return handle

    def set_timeout(self, callback: TimerCallback, delay_ms: float) -> Optional[int]:
        if self.closed:
            return None
        ref: List[int] = []
        handle = self.scheduler.set_timeout(self._wrap(ref, callback), delay_ms)
        ref.append(handle)
        self._handles.add(handle)
        return handle

    def set_interval(self, callback: TimerCallback, interval_ms: float) -> Optional[int]:
        if self.closed:
            return None
        inner = self._wrap([], callback)
        handle = self.scheduler.set_interval(inner, interval_ms)
        self._handles.add(handle)
        return handle

    def cancel(self, handle: Optional[int]) -> None:
        if handle is None:
            return
        self.scheduler.cancel(handle)
        self._handles.discard(handle)

    # Scheduler-compatible aliases so tweens can run on either object
    cancel_frame = cancel
    clear_timer = cancel

    def scope(self, on_error: Optional[ErrorHandler] = None) -> "SchedulerScope":
        return SchedulerScope(self.scheduler, on_error or self.on_error)

    def pending(self) -> int:
        return sum(1 for h in self._handles if self.scheduler.is_pending(h))

    def cancel_all(self) -> None:
        for handle in list(self._handles):
            self.scheduler.cancel(handle)
        self._handles.clear()

    def close(self) -> None:
        self.cancel_all()
        self.closed = True
