"""
Scroll Position Relay

Single authority for the page's scroll offset.

The host's raw scroll handler only records the offset and requests a
frame; the ScrollFrame is computed and delivered to subscribers from that
frame, never synchronously from the raw event. Any number of raw events
between two frames therefore produce one notification.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Deque, Dict, List, Optional

from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.engine.node_registry import NodeRegistry
from forgemotion.engine.tween import Tween
from forgemotion.models.config import ScrollConfig
from forgemotion.models.enums import FramePhase, LogCategory, ScrollDirection
from forgemotion.models.events import ScrollFrameEvent, SectionChangedEvent
from forgemotion.models.node import AnimatableNode
from forgemotion.models.scroll import ScrollFrame
from forgemotion.models.transition import TransitionConfig, ease_out_expo_scroll
from forgemotion.services.event_bus import EventBus
from forgemotion.services.motion_preference import MotionPreferenceGate
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.SCROLL)

ScrollSubscriber = Callable[[ScrollFrame], None]


class ScrollPositionRelay:
    """
    Coalesces raw scroll offsets into at most one ScrollFrame per frame.

    Optional smoothing (config.smooth) eases the authoritative offset toward
    the raw one by config.lerp per frame and snaps once within snap_px, so
    it always converges; under reduced motion the raw offset is used as is.

    Subscribers are named; re-subscribing a name replaces the callback. A
    failing subscriber is logged and does not affect the others.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        gate: MotionPreferenceGate,
        config: Optional[ScrollConfig] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.scheduler = scheduler
        self.gate = gate
        self.config = config or ScrollConfig()
        self.event_bus = event_bus

        self.enabled = True
        self._subscribers: Dict[str, ScrollSubscriber] = {}

        self._raw = 0.0
        self._offset = 0.0
        self._last_offset = 0.0
        self._last_time: Optional[float] = None
        self._velocities: Deque[float] = deque(maxlen=self.config.velocity_samples)
        self.velocity = 0.0
        self.direction = ScrollDirection.DOWN
        self.is_scrolling = False

        self.document_height = 0.0
        self.viewport_height = 0.0

        self._frame: Optional[int] = None
        self._end_timer: Optional[int] = None
        self._scroll_to: Optional[Tween] = None

        self.raw_events = 0
        self.frames_delivered = 0
        self.last_frame: Optional[ScrollFrame] = None

    # === Subscriptions ===

    def subscribe(self, name: str, callback: ScrollSubscriber) -> None:
        self._subscribers[name] = callback
        log.debug("Scroll subscriber added", name=name)

    def unsubscribe(self, name: str) -> None:
        self._subscribers.pop(name, None)

    # === Input ===

    def set_document_metrics(self, document_height: float, viewport_height: float) -> None:
        self.document_height = float(document_height)
        self.viewport_height = float(viewport_height)

    def on_raw_scroll(self, offset: float) -> None:
        """Record the platform scroll offset; delivery happens on the next frame"""
        self.raw_events += 1
        self._raw = float(offset)
        if not self.enabled:
            return
        self._request_frame()

        self.scheduler.clear_timer(self._end_timer)
        self._end_timer = self.scheduler.set_timeout(self._on_scroll_end, self.config.scroll_end_ms)

    def current_offset(self) -> float:
        return self._offset

    @property
    def progress(self) -> float:
        scrollable = self.document_height - self.viewport_height
        if scrollable <= 0:
            return 0.0
        return max(0.0, min(1.0, self._offset / scrollable))

    def enable(self) -> None:
        self.enabled = True
        if self._raw != self._offset:
            self._request_frame()

    def disable(self) -> None:
        self.enabled = False
        self.scheduler.cancel_frame(self._frame)
        self._frame = None

    # === Frame ===

    def _request_frame(self) -> None:
        if self._frame is None:
            self._frame = self.scheduler.request_frame(self._on_frame, FramePhase.WRITE)

    def _on_frame(self, now_ms: float) -> None:
        self._frame = None

        if self.config.smooth and not self.gate.reduced:
            delta = self._raw - self._offset
            if abs(delta) <= self.config.snap_px:
                self._offset = self._raw
            else:
                self._offset += delta * self.config.lerp
                self._request_frame()
        else:
            self._offset = self._raw

        self._update_velocity(now_ms)
        self.is_scrolling = True
        self._deliver(now_ms)

    def _update_velocity(self, now_ms: float) -> None:
        delta = self._offset - self._last_offset
        if delta > 0:
            self.direction = ScrollDirection.DOWN
        elif delta < 0:
            self.direction = ScrollDirection.UP

        if self._last_time is not None and now_ms > self._last_time:
            self._velocities.append(delta / (now_ms - self._last_time))
            self.velocity = sum(self._velocities) / len(self._velocities)
        self._last_offset = self._offset
        self._last_time = now_ms

    def _on_scroll_end(self) -> None:
        self._end_timer = None
        if self._frame is not None:
            # Smoothing still converging
            self._end_timer = self.scheduler.set_timeout(self._on_scroll_end, self.config.scroll_end_ms)
            return
        self.is_scrolling = False
        self.velocity = 0.0
        self._velocities.clear()
        log.debug("Scroll ended", offset=f"{self._offset:.1f}")
        self._deliver(self.scheduler.now_ms)

    def _deliver(self, now_ms: float) -> None:
        frame = ScrollFrame(
            offset=self._offset,
            velocity=self.velocity,
            timestamp=now_ms,
            direction=self.direction,
            progress=self.progress,
            is_scrolling=self.is_scrolling,
        )
        self.last_frame = frame
        self.frames_delivered += 1

        for name, callback in list(self._subscribers.items()):
            try:
                callback(frame)
            except Exception as e:
                log.error(
                    "Scroll subscriber failed",
                    name=name,
                    error=f"{type(e).__name__}: {e}",
                )
        if self.event_bus:
            self.event_bus.emit(ScrollFrameEvent(frame))

    # === Programmatic scrolling ===

    def scroll_to(self, offset: float, duration_ms: Optional[float] = None) -> Optional[Tween]:
        """
        Animate the scroll position to offset.

        Instant under reduced motion. The host applies current_offset() to
        the platform as frames are delivered.
        """
        if self._scroll_to is not None:
            self._scroll_to.cancel()
            self._scroll_to = None

        target = float(offset)
        if self.gate.reduced:
            self._offset = target
            self.on_raw_scroll(target)
            return None

        duration = self.config.scroll_to_ms if duration_ms is None else duration_ms

        def apply(values):
            self.on_raw_scroll(values["offset"])

        self._scroll_to = Tween(
            self.scheduler,
            {"offset": self._raw},
            {"offset": target},
            TransitionConfig(duration, ease_out_expo_scroll),
            apply,
            lambda: setattr(self, "_scroll_to", None),
        ).start()
        return self._scroll_to


class ScrollEffects:
    """
    Scroll-linked node effects, driven as a relay subscriber.

    - parallax nodes: translate_y = -(offset * speed)
    - progress bars: width_percent = min(progress * 100, 100)

    Parallax stays at rest under reduced motion; progress bars keep working
    since they convey position rather than motion.
    """

    def __init__(self, relay: ScrollPositionRelay, gate: MotionPreferenceGate):
        self.relay = relay
        self.gate = gate
        self.parallax: Dict[str, AnimatableNode] = {}
        self.progress_bars: Dict[str, AnimatableNode] = {}
        relay.subscribe("scroll-effects", self.on_frame)
        gate.subscribe(self._on_preference_changed)

    def register(self, node: AnimatableNode) -> None:
        if node.has_marker("parallax"):
            self.parallax[node.node_id] = node
        if node.has_marker("scroll-progress"):
            self.progress_bars[node.node_id] = node

    def unregister(self, node_id: str) -> None:
        self.parallax.pop(node_id, None)
        self.progress_bars.pop(node_id, None)

    def on_frame(self, frame: ScrollFrame) -> None:
        if not self.gate.reduced:
            default_speed = self.relay.config.parallax_speed
            for node in self.parallax.values():
                speed = node.params.parallax_speed
                if speed is None:
                    speed = default_speed
                node.style.translate_y = -(frame.offset * speed)
        for node in self.progress_bars.values():
            node.style.width_percent = min(frame.progress * 100.0, 100.0)

    def _on_preference_changed(self, reduced: bool) -> None:
        if reduced:
            for node in self.parallax.values():
                node.style.translate_y = 0.0


class SectionTracker:
    """
    Tracks which page section is current, driven as a relay subscriber.

    Sections are registered nodes carrying the "section" marker, with their
    box in page coordinates. The first match in document order wins:

    - scrolling down: offset + section_offset_px falls inside the section
    - scrolling up: the section spans the line at section_viewport_ratio
      of the viewport height

    A change is published as SectionChangedEvent; frames that match nothing
    or match the current section publish nothing.
    """

    MARKER = "section"

    def __init__(
        self,
        relay: ScrollPositionRelay,
        registry: NodeRegistry,
        event_bus: Optional[EventBus] = None,
    ):
        self.relay = relay
        self.registry = registry
        self.event_bus = event_bus
        self.current: Optional[str] = None
        self.changes = 0
        relay.subscribe("section-tracker", self.on_frame)

    def sections(self) -> List[AnimatableNode]:
        return sorted(self.registry.with_marker(self.MARKER), key=lambda n: n.box.top)

    def detect(self, offset: float, direction: ScrollDirection) -> Optional[str]:
        """Section id for the given offset and direction, or None"""
        cfg = self.relay.config
        for section in self.sections():
            top = section.box.top
            bottom = top + section.box.height
            if direction == ScrollDirection.DOWN:
                line = offset + cfg.section_offset_px
                if top <= line < bottom:
                    return section.node_id
            else:
                line = self.relay.viewport_height * cfg.section_viewport_ratio
                if top - offset <= line <= bottom - offset:
                    return section.node_id
        return None

    def on_frame(self, frame: ScrollFrame) -> None:
        section_id = self.detect(frame.offset, frame.direction)
        if section_id is None or section_id == self.current:
            return

        previous, self.current = self.current, section_id
        self.changes += 1
        log.debug("Current section changed", section=section_id, previous=previous, direction=frame.direction.name)
        if self.event_bus:
            self.event_bus.emit(SectionChangedEvent(section_id, previous, frame.direction))
