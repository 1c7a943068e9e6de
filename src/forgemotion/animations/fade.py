"""
Fade Routine

Scroll-reveal fade: opacity 0 → 1 while sliding up from 30px to rest.
"""

from typing import Optional

from forgemotion.animations.base import BaseRoutine
from forgemotion.engine.tween import Tween, Values
from forgemotion.models.enums import AnimationKind
from forgemotion.models.node import VisualState
from forgemotion.models.transition import TransitionConfig, resolve_easing


def fade_in(
    routine: BaseRoutine,
    style: VisualState,
    offset_px: float,
    transition: TransitionConfig,
    on_done=None,
) -> Tween:
    """Hide style at its start position, then transition it to rest"""
    style.opacity = 0.0
    style.translate_y = offset_px

    def apply(values: Values) -> None:
        style.opacity = values["opacity"]
        style.translate_y = values["y"]

    return routine.animate(
        {"opacity": 0.0, "y": offset_px},
        {"opacity": 1.0, "y": 0.0},
        transition,
        apply,
        on_done,
    )


class FadeRoutine(BaseRoutine):
    """
    Single transition; completes on transition end.

    Duration: node.params.duration_ms, else fade.duration_ms (800ms).
    """

    KIND = AnimationKind.FADE

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tween: Optional[Tween] = None

    def run(self) -> None:
        cfg = self.config.fade
        transition = TransitionConfig(
            duration_ms=self.node.params.duration_ms or cfg.duration_ms,
            ease_function=resolve_easing(cfg.easing),
        )
        self.tween = fade_in(
            self, self.node.style, cfg.offset_px, transition, lambda: self.complete(self.instant)
        )

    def apply_end_state(self) -> None:
        self.node.style.opacity = 1.0
        self.node.style.translate_y = 0.0
