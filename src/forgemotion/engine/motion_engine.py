"""
MotionEngine - the hosting page's single entry point.

Wires the scheduler, event bus, motion gate, visibility watcher,
dispatcher, pointer field, scroll relay and feedback routines together and
exposes the host-facing input/output surface:

    engine = MotionEngine.from_config_file("motion.yaml", reduced_motion=False)
    engine.register_node(AnimatableNode("stat-1", {"counter-animate"}, NodeParams(target=1000)))
    engine.on_visibility("stat-1", 0.4)
    engine.subscribe_finished(lambda node, instant: ...)
    await engine.start()           # or drive engine.tick(now_ms) manually
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict, Optional, Union

from forgemotion.engine.dispatcher import AnimationDispatcher, FinishedListener
from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.engine.node_registry import NodeRegistry
from forgemotion.managers.config_manager import ConfigManager
from forgemotion.models.config import EngineConfig
from forgemotion.models.enums import LogCategory, PointerKind
from forgemotion.models.events import (
    HoverChangedEvent,
    PointerLeftEvent,
    PointerMovedEvent,
    PressReleasedEvent,
    PressStartedEvent,
)
from forgemotion.models.node import AnimatableNode
from forgemotion.services.announcer import AnnouncementQueue, AnnouncementSink
from forgemotion.services.capabilities import CapabilityLoader, TimingCapability
from forgemotion.services.event_bus import EventBus
from forgemotion.services.interaction_feedback import InteractionFeedback, Ripple
from forgemotion.services.motion_preference import MotionPreferenceGate
from forgemotion.services.pointer_field import PointerFieldEngine
from forgemotion.services.scroll_relay import (
    ScrollEffects,
    ScrollPositionRelay,
    ScrollSubscriber,
    SectionTracker,
)
from forgemotion.services.visibility_watcher import VisibilityWatcher
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.SYSTEM)


class MotionEngine:
    """
    Engine facade.

    Owns every component; nothing here is process-global, so several
    engines (e.g. one per test) can coexist.
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        reduced_motion: bool = False,
        clock: Optional[Callable[[], float]] = None,
        timing: Optional[TimingCapability] = None,
        capability_loader: Optional[CapabilityLoader] = None,
        announcer_sink: Optional[AnnouncementSink] = None,
        event_bus: Optional[EventBus] = None,
    ):
        """
        Args:
            config: Engine configuration; factory values when omitted
            reduced_motion: Platform reduced-motion preference at startup
            clock: Seconds clock for the render loop (time.perf_counter by default)
            timing: Explicit timing capability; otherwise config.timing is loaded
            capability_loader: Loader used to resolve config.timing
            announcer_sink: Receives screen-reader announcements
            event_bus: Bus to publish on; a private one is created by default
        """
        self.config = config or EngineConfig()
        self.event_bus = event_bus or EventBus()
        self.scheduler = FrameScheduler(fps=self.config.fps, clock=clock)

        self.capabilities = capability_loader or CapabilityLoader()
        self.timing = timing or self.capabilities.load(self.config.timing)

        self.gate = MotionPreferenceGate(reduced_motion, self.event_bus)
        self.registry = NodeRegistry()
        self.watcher = VisibilityWatcher(
            self.scheduler, self.event_bus, self.config.visibility.thresholds
        )
        self.dispatcher = AnimationDispatcher(
            self.scheduler, self.gate, self.registry, self.config, self.timing, self.event_bus
        )
        self.pointer = PointerFieldEngine(self.scheduler, self.gate, self.config.pointer, self.timing)
        self.scroll = ScrollPositionRelay(self.scheduler, self.gate, self.config.scroll, self.event_bus)
        self.scroll_effects = ScrollEffects(self.scroll, self.gate)
        self.sections = SectionTracker(self.scroll, self.registry, self.event_bus)
        self.feedback = InteractionFeedback(self.scheduler, self.gate, self.config.feedback, self.timing)
        self.announcer = AnnouncementQueue(
            self.scheduler, self.config.announcer, announcer_sink, self.event_bus
        )

        self.watcher.on_enter(self._on_node_entered)

        log.info(
            "MotionEngine initialized",
            fps=self.config.fps,
            timing=self.timing.name,
            reduced_motion=self.gate.reduced,
        )

    @classmethod
    def from_config_file(cls, path: Optional[Union[str, Path]] = None, **kwargs) -> "MotionEngine":
        """Build an engine from a YAML file (factory defaults when path is None)"""
        config = ConfigManager(path).load()
        return cls(config=config, **kwargs)

    # === Nodes ===

    def register_node(self, node: AnimatableNode, observe: bool = True) -> AnimatableNode:
        """
        Make a node known to the engine.

        The node is observed for visibility (unless observe is False) and
        handed to every interaction component whose markers it carries.
        """
        self.registry.add(node)
        if observe:
            self.watcher.register(node)
        self.pointer.register(node)
        self.scroll_effects.register(node)
        self.feedback.register(node)
        log.debug("Node registered", node=node.node_id, kind=node.kind.name)
        return node

    def unregister_node(self, node_id: str) -> Optional[AnimatableNode]:
        """Forget a node and cancel everything scheduled on its behalf"""
        self.watcher.unregister(node_id)
        self.dispatcher.cancel(node_id)
        self.pointer.unregister(node_id)
        self.scroll_effects.unregister(node_id)
        self.feedback.unregister(node_id)
        return self.registry.remove(node_id)

    def get_node(self, node_id: str) -> Optional[AnimatableNode]:
        return self.registry.get(node_id)

    def animate_now(self, node_id: str) -> bool:
        """Dispatch a node without waiting for it to become visible"""
        return self.dispatcher.dispatch_id(node_id)

    def _on_node_entered(self, node: AnimatableNode, ratio: float) -> None:
        if node.node_id not in self.registry:
            return
        self.dispatcher.dispatch(node)

    # === Host input ===

    def on_visibility(self, node_id: str, ratio: float, is_intersecting: bool = True) -> bool:
        return self.watcher.update(node_id, ratio, is_intersecting)

    def on_pointer(self, x: float = 0.0, y: float = 0.0, kind: PointerKind = PointerKind.MOVE) -> None:
        if kind == PointerKind.LEAVE:
            self.pointer.on_pointer_leave()
            self.event_bus.emit(PointerLeftEvent())
            return
        self.pointer.on_pointer_move(x, y)
        self.event_bus.emit(PointerMovedEvent(x, y))

    def on_press(self, target_id: str, x: float, y: float) -> Optional[Ripple]:
        ripple = self.feedback.press(target_id, x, y)
        self.event_bus.emit(PressStartedEvent(target_id, x, y))
        return ripple

    def on_release(self, target_id: str) -> None:
        self.feedback.release(target_id)
        self.event_bus.emit(PressReleasedEvent(target_id))

    def on_hover(self, target_id: str, entered: bool) -> None:
        self.feedback.hover(target_id, entered)
        self.event_bus.emit(HoverChangedEvent(target_id, entered))

    def on_scroll(self, offset: float) -> None:
        self.scroll.on_raw_scroll(offset)

    def set_document_metrics(self, document_height: float, viewport_height: float) -> None:
        self.scroll.set_document_metrics(document_height, viewport_height)

    def set_reduced_motion(self, reduced: bool) -> bool:
        return self.gate.set(reduced)

    def scroll_to(self, offset: float, duration_ms: Optional[float] = None) -> None:
        self.scroll.scroll_to(offset, duration_ms)

    def announce(self, message: str) -> None:
        self.announcer.announce(message)

    # === Outputs ===

    def current_offset(self) -> float:
        return self.scroll.current_offset()

    def current_section(self) -> Optional[str]:
        """Id of the section node the reader is in, once scrolling has located one"""
        return self.sections.current

    def subscribe_finished(self, callback: FinishedListener) -> None:
        """callback(node, instant) once per node when it reaches DONE"""
        self.dispatcher.on_finished(callback)

    def subscribe_scroll(self, callback: ScrollSubscriber, name: Optional[str] = None) -> str:
        """Receive one ScrollFrame per frame with scroll activity. Returns the subscription name."""
        name = name or f"subscriber-{id(callback)}"
        self.scroll.subscribe(name, callback)
        return name

    def unsubscribe_scroll(self, name: str) -> None:
        self.scroll.unsubscribe(name)

    # === Clock ===

    def tick(self, now_ms: Optional[float] = None) -> int:
        return self.scheduler.tick(now_ms)

    def advance(self, duration_ms: float, step_ms: Optional[float] = None) -> int:
        return self.scheduler.advance(duration_ms, step_ms)

    async def start(self) -> None:
        await self.scheduler.start()

    async def stop(self) -> None:
        await self.scheduler.stop()
        self.announcer.clear()

    def get_metrics(self) -> Dict:
        metrics = self.scheduler.get_metrics()
        metrics.update({
            "nodes": len(self.registry),
            "active_animations": self.dispatcher.active_count(),
            "routine_failures": self.dispatcher.failures,
            "scroll_frames": self.scroll.frames_delivered,
            "section_changes": self.sections.changes,
            "pointer_frames": self.pointer.frames_applied,
            "announcements": self.announcer.delivered_count,
            "reduced_motion": self.gate.reduced,
        })
        return metrics
