"""
Counter Routine

Counts a node's text from 0 up to params.target with a cubic ease-out,
one value per frame.
"""

import math
from typing import Optional

from forgemotion.animations.base import BaseRoutine
from forgemotion.models.enums import AnimationKind, CounterFormat
from forgemotion.models.transition import clamp01, ease_out_cubic


def format_counter(value: int, fmt: CounterFormat) -> str:
    """
    Render a counter value.

    Examples:
        format_counter(1000, CounterFormat.NUMBER)      -> "1,000"
        format_counter(1000, CounterFormat.PERCENTAGE)  -> "1000%"
        format_counter(1000, CounterFormat.CURRENCY)    -> "$1,000"
    """
    if fmt == CounterFormat.PERCENTAGE:
        return f"{value}%"
    if fmt == CounterFormat.CURRENCY:
        return f"${value:,}"
    return f"{value:,}"


def counter_value(target: int, progress: float) -> int:
    """floor(target * ease_out_cubic(p)), exact at p >= 1"""
    p = clamp01(progress)
    if p >= 1.0:
        return target
    return int(math.floor(target * ease_out_cubic(p)))


class CounterRoutine(BaseRoutine):
    """
    Frame loop over the scheduler scope.

    The value never decreases and the final frame shows the exact target.
    Cancelling (reduced motion turned on mid-count) snaps to the target.
    """

    KIND = AnimationKind.COUNTER

    def prepare(self) -> None:
        self.target = int(self.node.params.target)
        self.fmt = CounterFormat(self.node.params.format or self.config.counter.format)
        self.duration = self.node.params.duration_ms or self.config.counter.duration_ms
        self.current_value = 0
        self._t0: Optional[float] = None

    def run(self) -> None:
        if self.instant or self.duration <= 0:
            self.apply_end_state()
            self.complete(instant=True)
            return
        self._render(0)
        self.scheduler.request_frame(self._frame)

    def _frame(self, now_ms: float) -> None:
        if self._t0 is None:
            self._t0 = now_ms
        progress = (now_ms - self._t0) / self.duration
        value = max(self.current_value, counter_value(self.target, progress))
        self._render(value)
        if progress >= 1.0:
            self._render(self.target)
            self.complete()
            return
        self.scheduler.request_frame(self._frame)

    def _render(self, value: int) -> None:
        self.current_value = value
        self.node.text = format_counter(value, self.fmt)

    def apply_end_state(self) -> None:
        self._render(self.target)
