"""
Tween - frame-driven interpolation of named numeric properties

A tween samples its easing curve once per frame, hands the interpolated
values to on_update, and re-schedules itself on the next frame until the
transition ends. The start time is taken from the first frame it sees, the
way a CSS transition starts on the frame after the style change.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Union

from forgemotion.engine.frame_scheduler import FrameScheduler, SchedulerScope
from forgemotion.models.transition import TransitionConfig, clamp01

Values = Dict[str, float]
Scheduler = Union[FrameScheduler, SchedulerScope]


class Tween:
    """
    Interpolates start → end over config.duration_ms after config.delay_ms.

    cancel() freezes the tween at its current values; finish() jumps to the
    end values and fires on_complete. current() always reflects the last
    values handed to on_update, so a reverse transition can start from
    wherever this one was interrupted.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        start: Values,
        end: Values,
        config: TransitionConfig,
        on_update: Callable[[Values], None],
        on_complete: Optional[Callable[[], None]] = None,
    ):
        missing = set(start) ^ set(end)
        if missing:
            raise ValueError(f"Tween start/end keys differ: {sorted(missing)}")

        self.scheduler = scheduler
        self.start_values = dict(start)
        self.end_values = dict(end)
        self.config = config
        self.on_update = on_update
        self.on_complete = on_complete

        self._values: Values = dict(start)
        self._handle: Optional[int] = None
        self._started_at: Optional[float] = None
        self.running = False
        self.finished = False
        self.cancelled = False

    @property
    def started_at(self) -> Optional[float]:
        """Frame time of the first interpolated frame (after delay)"""
        return self._started_at

    def current(self) -> Values:
        return dict(self._values)

    def start(self) -> "Tween":
        if self.running or self.finished:
            return self
        self.running = True
        self._handle = self.scheduler.request_frame(self._step)
        return self

    def _step(self, now_ms: float) -> None:
        self._handle = None
        if not self.running:
            return

        if self._started_at is None:
            self._started_at = now_ms + self.config.delay_ms
        if now_ms < self._started_at:
            self._handle = self.scheduler.request_frame(self._step)
            return

        duration = self.config.duration_ms
        progress = 1.0 if duration <= 0 else clamp01((now_ms - self._started_at) / duration)
        if progress >= 1.0:
            self._complete()
            return

        eased = self.config.ease_function(progress)
        self._values = {
            key: self.start_values[key] + (self.end_values[key] - self.start_values[key]) * eased
            for key in self.start_values
        }
        self.on_update(dict(self._values))
        self._handle = self.scheduler.request_frame(self._step)

    def _complete(self) -> None:
        # Final frame lands exactly on the end values
        self._values = dict(self.end_values)
        self.running = False
        self.finished = True
        self.on_update(dict(self._values))
        if self.on_complete:
            self.on_complete()

    def cancel(self) -> None:
        if not self.running:
            return
        self.running = False
        self.cancelled = True
        self.scheduler.cancel_frame(self._handle)
        self._handle = None

    def finish(self) -> None:
        """Jump to the end values synchronously"""
        if self.finished:
            return
        self.scheduler.cancel_frame(self._handle)
        self._handle = None
        self.running = True
        self._complete()
