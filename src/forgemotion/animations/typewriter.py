"""
Typewriter Routine

Reveals the node's original text one character per speed_ms tick.
"""

from typing import Optional

from forgemotion.animations.base import BaseRoutine
from forgemotion.models.enums import AnimationKind


class TypewriterRoutine(BaseRoutine):
    """
    Driven by an interval timer rather than frames.

    The scheduler fires an overdue interval once per missed period, so a
    late tick catches up without dropping characters.
    """

    KIND = AnimationKind.TYPEWRITER

    def prepare(self) -> None:
        self.full_text = self.node.source_text
        self.speed = self.node.params.speed_ms or self.config.typewriter.speed_ms
        self.index = 0
        self._timer: Optional[int] = None

    def run(self) -> None:
        if self.instant or not self.full_text:
            self.apply_end_state()
            self.complete(instant=True)
            return
        self.node.text = ""
        self._timer = self.scheduler.set_interval(self._type_next, self.speed)

    def _type_next(self) -> None:
        if self.index >= len(self.full_text):
            return
        self.index += 1
        self.node.text = self.full_text[:self.index]
        if self.index >= len(self.full_text):
            self.scheduler.clear_timer(self._timer)
            self._timer = None
            self.complete()

    def apply_end_state(self) -> None:
        self.index = len(self.full_text)
        self.node.text = self.full_text
