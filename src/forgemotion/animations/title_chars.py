"""
Title Characters Routine

Splits a title into one unit per character and fades/slides each unit in,
unit i starting i * char_delay_ms after the trigger.
"""

from typing import List

from forgemotion.animations.base import BaseRoutine
from forgemotion.animations.fade import fade_in
from forgemotion.models.enums import AnimationKind
from forgemotion.models.node import AnimatableNode, CharUnit, NBSP
from forgemotion.models.transition import TransitionConfig, resolve_easing


def split_chars(node: AnimatableNode, char_delay_ms: float) -> List[CharUnit]:
    """
    Split node.text into CharUnits.

    Spaces become NBSP units so they keep their width once laid out as
    separate boxes. The node's own text is cleared; visible_text()
    reassembles the units. Already split nodes are returned unchanged.
    """
    if node.chars is not None:
        return node.chars
    units = []
    for i, char in enumerate(node.source_text):
        is_space = char == " "
        units.append(CharUnit(
            char=NBSP if is_space else char,
            index=i,
            delay_ms=i * char_delay_ms,
            is_space=is_space,
        ))
    node.chars = units
    node.text = ""
    return units


class TitleCharsRoutine(BaseRoutine):
    """Completes when the last unit's transition ends"""

    KIND = AnimationKind.TITLE_CHARS

    def run(self) -> None:
        if self.node.is_split:
            # Split on an earlier run: structure and final styles stay as they are
            self.apply_end_state()
            self.complete(instant=True)
            return

        cfg = self.config.title_chars
        char_delay = self.node.params.char_delay_ms
        if char_delay is None:
            char_delay = cfg.char_delay_ms
        units = split_chars(self.node, char_delay)
        if not units:
            self.complete(instant=True)
            return

        base = TransitionConfig(
            duration_ms=self.node.params.duration_ms or cfg.duration_ms,
            ease_function=resolve_easing(cfg.easing),
        )
        self.remaining = len(units)
        for unit in units:
            fade_in(self, unit.style, cfg.offset_px, base.with_delay(unit.delay_ms), self._unit_done)

    def _unit_done(self) -> None:
        self.remaining -= 1
        if self.remaining <= 0:
            self.complete(self.instant)

    def apply_end_state(self) -> None:
        units = split_chars(self.node, self.config.title_chars.char_delay_ms)
        for unit in units:
            unit.style.opacity = 1.0
            unit.style.translate_y = 0.0
