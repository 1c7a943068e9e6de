"""
Animation Dispatcher

Turns "node became visible" into exactly one routine run per node.

Lifecycle per node:
    PENDING --dispatch--> RUNNING --routine completes--> DONE

A node that is not PENDING is never dispatched again, so duplicate
visibility events, a second entry after scrolling back, or a stagger member
already animated by its group are all absorbed here.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional, Type

from forgemotion.animations import BaseRoutine, RoutineContext, build_routine_registry
from forgemotion.engine.frame_scheduler import FrameScheduler, SchedulerScope
from forgemotion.engine.node_registry import NodeRegistry
from forgemotion.models.config import EngineConfig
from forgemotion.models.enums import AnimationKind, LogCategory, NodeState
from forgemotion.models.events import (
    AnimationFailedEvent,
    AnimationFinishedEvent,
    AnimationStartedEvent,
)
from forgemotion.models.errors import UnknownNodeError
from forgemotion.models.node import AnimatableNode
from forgemotion.services.capabilities import FrameTimingCapability, TimingCapability
from forgemotion.services.event_bus import EventBus
from forgemotion.services.motion_preference import MotionPreferenceGate
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.DISPATCH)

FinishedListener = Callable[[AnimatableNode, bool], None]


class AnimationDispatcher:
    """
    Routes nodes to their per-kind routine.

    Each run owns a SchedulerScope: cancelling the node cancels everything
    the routine scheduled, and an exception raised in any frame step of the
    routine is routed to _fail() instead of escaping into the scheduler.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        gate: MotionPreferenceGate,
        registry: NodeRegistry,
        config: Optional[EngineConfig] = None,
        timing: Optional[TimingCapability] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.scheduler = scheduler
        self.gate = gate
        self.registry = registry
        self.config = config or EngineConfig()
        self.timing = timing or FrameTimingCapability()
        self.event_bus = event_bus

        self.routines: Dict[AnimationKind, Type[BaseRoutine]] = build_routine_registry()
        self._active: Dict[str, BaseRoutine] = {}
        self._scopes: Dict[str, SchedulerScope] = {}
        self._listeners: List[FinishedListener] = []

        self.run_counts: Dict[str, int] = {}
        self.failures = 0

        gate.subscribe(self._on_preference_changed)

    # === Subscriptions ===

    def on_finished(self, listener: FinishedListener) -> None:
        """listener(node, instant) after a node reaches DONE"""
        self._listeners.append(listener)

    # === Dispatch ===

    def dispatch(self, node: AnimatableNode) -> bool:
        """
        Run the node's routine if it has not run yet.

        Returns:
            True if a routine was started
        """
        if node.state != NodeState.PENDING:
            log.debug("Dispatch absorbed", node=node.node_id, state=node.state.name)
            return False

        routine_cls = self.routines.get(node.kind, self.routines[AnimationKind.DEFAULT])
        scope = self.scheduler.scope(on_error=lambda ex: self._fail(node, ex))
        context = RoutineContext(
            scheduler=scope,
            gate=self.gate,
            config=self.config,
            timing=self.timing,
            registry=self.registry,
            mark_running=self._mark_running,
            mark_done=self._mark_done,
        )
        routine = routine_cls(node, context, lambda instant: self._on_complete(node, instant))

        self._active[node.node_id] = routine
        self._scopes[node.node_id] = scope
        self.run_counts[node.node_id] = self.run_counts.get(node.node_id, 0) + 1
        self._mark_running(node)

        log.debug("Dispatching", node=node.node_id, kind=node.kind.name, reduced=self.gate.reduced)
        try:
            routine.start()
        except Exception as ex:
            self._fail(node, ex)
        return True

    def dispatch_id(self, node_id: str) -> bool:
        try:
            node = self.registry.require(node_id)
        except UnknownNodeError:
            log.debug("Dispatch for unknown node ignored", node=node_id)
            return False
        return self.dispatch(node)

    def is_active(self, node_id: str) -> bool:
        return node_id in self._active

    def active_count(self) -> int:
        return len(self._active)

    def cancel(self, node_id: str) -> None:
        """
        Stop a node's routine without completing it (node unregistered).

        Group members the routine had claimed are settled on their end
        state and marked DONE.
        """
        routine = self._active.pop(node_id, None)
        scope = self._scopes.pop(node_id, None)
        if routine is not None:
            try:
                routine.release()
            except Exception as ex:
                log.error(
                    "Releasing routine failed",
                    node=node_id,
                    error=f"{type(ex).__name__}: {ex}",
                )
        if scope is not None:
            scope.close()

    def snap_all(self) -> None:
        """Land every in-flight routine on its end state"""
        for node_id, routine in list(self._active.items()):
            try:
                routine.snap()
            except Exception as ex:
                self._fail(routine.node, ex)

    # === Lifecycle transitions ===

    def _mark_running(self, node: AnimatableNode) -> None:
        node.state = NodeState.RUNNING
        if self.event_bus:
            self.event_bus.emit(AnimationStartedEvent(node.node_id, node.kind))

    def _mark_done(self, node: AnimatableNode, instant: bool = False, failed: bool = False) -> None:
        if node.state == NodeState.DONE:
            return
        node.state = NodeState.DONE
        for listener in list(self._listeners):
            try:
                listener(node, instant)
            except Exception as ex:
                log.error(
                    "Finished listener failed",
                    node=node.node_id,
                    error=f"{type(ex).__name__}: {ex}",
                )
        if self.event_bus:
            self.event_bus.emit(AnimationFinishedEvent(node.node_id, node.kind, instant, failed))

    def _on_complete(self, node: AnimatableNode, instant: bool) -> None:
        self._active.pop(node.node_id, None)
        scope = self._scopes.pop(node.node_id, None)
        if scope is not None:
            scope.close()
        log.debug("Animation finished", node=node.node_id, kind=node.kind.name, instant=instant)
        self._mark_done(node, instant)

    def _fail(self, node: AnimatableNode, ex: BaseException) -> None:
        self.failures += 1
        node_log = log.for_node(node.node_id)
        node_log.error(
            "Animation routine failed, applying end state",
            kind=node.kind.name,
            error=f"{type(ex).__name__}: {ex}",
        )

        routine = self._active.pop(node.node_id, None)
        scope = self._scopes.pop(node.node_id, None)
        if scope is not None:
            scope.close()
        if routine is not None:
            routine.cancel()
            routine.completed = True
            try:
                routine.apply_end_state()
            except Exception as end_ex:
                node_log.warn(
                    "End state failed, using generic end state",
                    error=f"{type(end_ex).__name__}: {end_ex}",
                )
                self._generic_end_state(node)
        else:
            self._generic_end_state(node)

        self._mark_done(node, instant=True, failed=True)
        if self.event_bus:
            self.event_bus.emit(AnimationFailedEvent(node.node_id, node.kind, f"{type(ex).__name__}: {ex}"))

    @staticmethod
    def _generic_end_state(node: AnimatableNode) -> None:
        node.style.opacity = 1.0
        node.style.reset_transform()
        if node.chars is not None:
            for unit in node.chars:
                unit.style.opacity = 1.0
                unit.style.reset_transform()
        else:
            node.text = node.source_text
        if node.content is not None:
            node.content.style.reset_transform()

    # === Motion preference ===

    def _on_preference_changed(self, reduced: bool) -> None:
        if reduced and self._active:
            log.info("Reduced motion enabled, snapping running animations", count=len(self._active))
            self.snap_all()
