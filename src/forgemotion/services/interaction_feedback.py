"""
Interaction Feedback

Transient visual responses to direct interaction:

- ripple: a circle grows out of the press point and fades (600ms), one
  active ripple per target
- press: scale dips to 0.95 and comes back to 1, each leg press_ms
- hover: scale up to 1.05 and glow in; leaving animates back from wherever
  the enter transition currently is

These never touch a node's lifecycle state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.engine.tween import Tween
from forgemotion.models.config import FeedbackConfig
from forgemotion.models.enums import FeedbackEffect, LogCategory
from forgemotion.models.node import AnimatableNode, VisualState
from forgemotion.models.transition import TransitionConfig, ease_linear, ease_out_quad
from forgemotion.services.capabilities import FrameTimingCapability, TimingCapability
from forgemotion.services.motion_preference import MotionPreferenceGate
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.FEEDBACK)

# Marker → effects enabled for the node
EFFECT_MARKERS: Dict[str, tuple] = {
    "ripple": (FeedbackEffect.RIPPLE,),
    "btn": (FeedbackEffect.RIPPLE, FeedbackEffect.PRESS),
    "scale-hover": (FeedbackEffect.HOVER_SCALE,),
    "card": (FeedbackEffect.HOVER_SCALE,),
    "glow-hover": (FeedbackEffect.HOVER_GLOW,),
}


@dataclass
class Ripple:
    """Transient surface owned by the engine, removed when its transition ends"""
    target_id: str
    x: float
    y: float
    size: float
    style: VisualState = field(default_factory=lambda: VisualState(scale=0.0))
    tween: Optional[Tween] = field(default=None, repr=False)

    @property
    def left(self) -> float:
        return self.x - self.size / 2

    @property
    def top(self) -> float:
        return self.y - self.size / 2


@dataclass
class FeedbackState:
    """Per-node feedback components combined into node.style.scale"""
    node: AnimatableNode
    effects: frozenset
    hover_scale: float = 1.0
    press_scale: float = 1.0
    hover_tween: Optional[Tween] = None
    press_tween: Optional[Tween] = None
    glow_tween: Optional[Tween] = None
    hovered: bool = False
    pressed: bool = False

    def write(self) -> None:
        self.node.style.scale = self.hover_scale * self.press_scale


class InteractionFeedback:
    """
    Press, ripple and hover feedback on registered nodes.

    Under reduced motion ripples and scale changes are suppressed and glow
    is applied without a transition.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        gate: MotionPreferenceGate,
        config: Optional[FeedbackConfig] = None,
        timing: Optional[TimingCapability] = None,
    ):
        self.scheduler = scheduler
        self.gate = gate
        self.config = config or FeedbackConfig()
        self.timing = timing or FrameTimingCapability()

        self.states: Dict[str, FeedbackState] = {}
        self.ripples: Dict[str, Ripple] = {}
        self._ripple_listeners: List[Callable[[Ripple, bool], None]] = []

        gate.subscribe(self._on_preference_changed)

    # === Registration ===

    def register(self, node: AnimatableNode) -> bool:
        effects = set()
        for marker, marker_effects in EFFECT_MARKERS.items():
            if node.has_marker(marker):
                effects.update(marker_effects)
        if not effects:
            return False
        self.states[node.node_id] = FeedbackState(node=node, effects=frozenset(effects))
        return True

    def unregister(self, node_id: str) -> None:
        state = self.states.pop(node_id, None)
        if state is not None:
            for tween in (state.hover_tween, state.press_tween, state.glow_tween):
                if tween is not None:
                    tween.cancel()
        self._remove_ripple(node_id)

    def on_ripple(self, listener: Callable[[Ripple, bool], None]) -> None:
        """listener(ripple, added) when a ripple surface is created or removed"""
        self._ripple_listeners.append(listener)

    # === Press ===

    def press(self, target_id: str, x: float, y: float) -> Optional[Ripple]:
        """
        Press at (x, y) relative to the target's top-left corner.

        Returns:
            The new ripple, or None when no ripple was created
        """
        state = self.states.get(target_id)
        if state is None:
            log.debug("Press on untracked node ignored", node=target_id)
            return None
        state.pressed = True
        if self.gate.reduced:
            return None

        if FeedbackEffect.PRESS in state.effects:
            self._press_dip(state)

        if FeedbackEffect.RIPPLE in state.effects:
            return self._start_ripple(state.node, x, y)
        return None

    def release(self, target_id: str) -> None:
        state = self.states.get(target_id)
        if state is None:
            return
        state.pressed = False

    def _press_dip(self, state: FeedbackState) -> None:
        def back():
            state.press_tween = self._transition(
                None,
                state.press_scale,
                1.0,
                self.config.press_ms,
                lambda v: self._set_press(state, v),
            )

        state.press_tween = self._transition(
            state.press_tween,
            state.press_scale,
            self.config.press_scale,
            self.config.press_ms,
            lambda v: self._set_press(state, v),
            back,
        )

    def _set_press(self, state: FeedbackState, value: float) -> None:
        state.press_scale = value
        state.write()

    def _start_ripple(self, node: AnimatableNode, x: float, y: float) -> Ripple:
        self._remove_ripple(node.node_id)

        ripple = Ripple(
            target_id=node.node_id,
            x=x,
            y=y,
            size=max(node.box.width, node.box.height),
        )
        self.ripples[node.node_id] = ripple
        self._notify_ripple(ripple, True)

        def apply(values):
            ripple.style.scale = values["scale"]
            ripple.style.opacity = values["opacity"]

        def done():
            if self.ripples.get(node.node_id) is ripple:
                self._remove_ripple(node.node_id)

        ripple.tween = self.timing.animate(
            self.scheduler,
            {"scale": 0.0, "opacity": 1.0},
            {"scale": 1.0, "opacity": 0.0},
            TransitionConfig(self.config.ripple_ms, ease_linear),
            apply,
            done,
        )
        return ripple

    def _remove_ripple(self, target_id: str) -> None:
        ripple = self.ripples.pop(target_id, None)
        if ripple is None:
            return
        if ripple.tween is not None:
            ripple.tween.cancel()
        self._notify_ripple(ripple, False)

    def _notify_ripple(self, ripple: Ripple, added: bool) -> None:
        for listener in list(self._ripple_listeners):
            try:
                listener(ripple, added)
            except Exception as e:
                log.error("Ripple listener failed", error=f"{type(e).__name__}: {e}")

    # === Hover ===

    def hover(self, target_id: str, entered: bool) -> None:
        state = self.states.get(target_id)
        if state is None:
            return
        if state.hovered == entered:
            return
        state.hovered = entered
        node = state.node

        if FeedbackEffect.HOVER_SCALE in state.effects and not self.gate.reduced:
            state.hover_tween = self._transition(
                state.hover_tween,
                state.hover_scale,
                self.config.hover_scale if entered else 1.0,
                self.config.hover_scale_ms,
                lambda v: self._set_hover(state, v),
            )

        if FeedbackEffect.HOVER_GLOW in state.effects:
            target = 1.0 if entered else 0.0
            if self.gate.reduced:
                if state.glow_tween is not None:
                    state.glow_tween.cancel()
                node.style.glow = target
                return

            def set_glow(v):
                node.style.glow = v

            state.glow_tween = self._transition(
                state.glow_tween, node.style.glow, target, self.config.glow_ms, set_glow
            )

    def _set_hover(self, state: FeedbackState, value: float) -> None:
        state.hover_scale = value
        state.write()

    # === Helpers ===

    def _transition(
        self,
        previous: Optional[Tween],
        start: float,
        end: float,
        duration_ms: float,
        apply: Callable[[float], None],
        on_complete: Optional[Callable[[], None]] = None,
    ) -> Tween:
        """Replace previous with a transition that starts from the current value"""
        if previous is not None:
            previous.cancel()
        return self.timing.animate(
            self.scheduler,
            {"v": start},
            {"v": end},
            TransitionConfig(duration_ms, ease_out_quad),
            lambda values: apply(values["v"]),
            on_complete,
        )

    def _on_preference_changed(self, reduced: bool) -> None:
        if not reduced:
            return
        for target_id in list(self.ripples):
            self._remove_ripple(target_id)
        for state in self.states.values():
            for tween in (state.hover_tween, state.press_tween):
                if tween is not None:
                    tween.cancel()
            state.hover_tween = state.press_tween = None
            state.hover_scale = 1.0
            state.press_scale = 1.0
            state.write()
            if state.glow_tween is not None:
                state.glow_tween.finish()
                state.glow_tween = None
