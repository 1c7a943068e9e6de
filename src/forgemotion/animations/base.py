"""
Base Routine Class

All per-kind animation routines inherit from BaseRoutine and implement
run() and apply_end_state().
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List, Optional, TYPE_CHECKING

from forgemotion.engine.frame_scheduler import SchedulerScope
from forgemotion.engine.tween import Tween, Values
from forgemotion.models.config import EngineConfig
from forgemotion.models.enums import AnimationKind
from forgemotion.models.node import AnimatableNode
from forgemotion.models.transition import TransitionConfig
from forgemotion.services.capabilities import InstantTimingCapability, TimingCapability

if TYPE_CHECKING:
    from forgemotion.engine.node_registry import NodeRegistry
    from forgemotion.services.motion_preference import MotionPreferenceGate


@dataclass
class RoutineContext:
    """
    Everything a routine may touch.

    scheduler is a scope owned by the dispatcher for this node: closing it
    cancels every continuation the routine scheduled, and exceptions raised
    from scoped callbacks are routed to the dispatcher's failure handler.
    """
    scheduler: SchedulerScope
    gate: "MotionPreferenceGate"
    config: EngineConfig
    timing: TimingCapability
    registry: "NodeRegistry"
    mark_running: Callable[[AnimatableNode], None]
    mark_done: Callable[[AnimatableNode, bool], None]


class BaseRoutine:
    """
    One-shot animation for a single trigger node.

    IMPORTANT:
    - One routine instance = ONE trigger. The dispatcher never restarts it.
    - start() consults the motion gate first: under reduced motion the end
      state is applied synchronously and the routine completes immediately.
    - complete() must be called exactly once when the animation ends;
      later calls are ignored.

    Subclasses MUST implement:
        run()              start producing motion
        apply_end_state()  put every surface the routine owns in its final,
                           fully rendered state (also the failure fallback)
    """

    KIND: AnimationKind = AnimationKind.DEFAULT

    def __init__(
        self,
        node: AnimatableNode,
        context: RoutineContext,
        on_complete: Callable[[bool], None],
    ):
        self.node = node
        self.ctx = context
        self._on_complete = on_complete
        self._tweens: List[Tween] = []
        self.started_at: Optional[float] = None
        self.completed = False

    # ------------------------------------------------------------
    # Runtime
    # ------------------------------------------------------------

    @property
    def scheduler(self) -> SchedulerScope:
        return self.ctx.scheduler

    @property
    def config(self) -> EngineConfig:
        return self.ctx.config

    @property
    def instant(self) -> bool:
        """True when motion must not be produced right now"""
        return self.ctx.gate.reduced or isinstance(self.ctx.timing, InstantTimingCapability)

    def prepare(self) -> None:
        """Capture whatever run() and apply_end_state() both need"""

    def start(self) -> None:
        self.started_at = self.scheduler.now_ms
        self.prepare()
        if self.ctx.gate.reduced:
            self.apply_end_state()
            self.complete(instant=True)
            return
        self.run()

    def run(self) -> None:
        raise NotImplementedError

    def apply_end_state(self) -> None:
        raise NotImplementedError

    def complete(self, instant: bool = False) -> None:
        if self.completed:
            return
        self.completed = True
        self._on_complete(instant)

    def cancel(self) -> None:
        """Stop all in-flight motion, leaving properties where they are"""
        for tween in self._tweens:
            tween.cancel()
        self._tweens.clear()
        self.scheduler.cancel_all()

    def release(self) -> None:
        """Trigger node is going away; leave nothing else it owns mid-animation"""
        self.cancel()

    def snap(self) -> None:
        """Cancel in-flight motion and land on the end state"""
        self.cancel()
        self.apply_end_state()
        self.complete(instant=True)

    # ------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------

    def animate(
        self,
        start: Values,
        end: Values,
        transition: TransitionConfig,
        on_update: Callable[[Values], None],
        on_complete: Optional[Callable[[], None]] = None,
    ) -> Tween:
        tween = self.ctx.timing.animate(self.scheduler, start, end, transition, on_update, on_complete)
        self._tweens.append(tween)
        return tween
