"""
Visibility Watcher

Wraps the host's viewport-intersection primitive. The host forwards raw
intersection samples through update(); the watcher turns them into one-shot
"entered" events, delivered on the next frame boundary.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

from forgemotion.engine.frame_scheduler import FrameScheduler
from forgemotion.models.enums import LogCategory
from forgemotion.models.events import VisibilityEnteredEvent
from forgemotion.models.node import AnimatableNode
from forgemotion.services.event_bus import EventBus
from forgemotion.utils.logger import get_category_logger

log = get_category_logger(LogCategory.VISIBILITY)

EnterCallback = Callable[[AnimatableNode, float], None]

DEFAULT_THRESHOLDS = (0.1, 0.3, 0.5, 0.7, 0.9)


@dataclass
class Observation:
    node: AnimatableNode
    thresholds: List[float]
    inside: bool = False
    last_ratio: float = 0.0
    pending: List[int] = field(default_factory=list)
    entries: int = 0

    @property
    def lowest(self) -> float:
        return self.thresholds[0]


class VisibilityWatcher:
    """
    Per-node enter detection.

    A node "enters" when a sample reports it intersecting at a ratio at or
    above its lowest threshold while it was previously outside. It fires once
    per such transition; staying inside (even crossing higher thresholds)
    does not fire again, and only a sample below the lowest threshold (an
    exit) re-arms it. Registering a node that is already visible does not
    fire retroactively; the first sample after registration decides.

    The watcher does not interpret ratios beyond that; the reported ratio
    and threshold are forwarded to subscribers.
    """

    def __init__(
        self,
        scheduler: FrameScheduler,
        event_bus: Optional[EventBus] = None,
        default_thresholds: Sequence[float] = DEFAULT_THRESHOLDS,
    ):
        self.scheduler = scheduler
        self.event_bus = event_bus
        self.default_thresholds = sorted(default_thresholds)
        self._observations: Dict[str, Observation] = {}
        self._callbacks: List[EnterCallback] = []

    # === Registration ===

    def register(self, node: AnimatableNode, thresholds: Optional[Sequence[float]] = None) -> None:
        """Begin observing node"""
        values = sorted(thresholds or node.params.thresholds or self.default_thresholds)
        if node.node_id in self._observations:
            self.unregister(node.node_id)
        self._observations[node.node_id] = Observation(node=node, thresholds=values)
        log.debug("Observing node", node=node.node_id, thresholds=values)

    def unregister(self, node_id: str) -> None:
        """Stop observing; pending enter callbacks for the node are cancelled"""
        obs = self._observations.pop(node_id, None)
        if obs is None:
            return
        for handle in obs.pending:
            self.scheduler.cancel_frame(handle)
        obs.pending.clear()

    def is_observing(self, node_id: str) -> bool:
        return node_id in self._observations

    def on_enter(self, callback: EnterCallback) -> None:
        """Subscribe to entered notifications: callback(node, ratio)"""
        self._callbacks.append(callback)

    # === Samples ===

    def update(self, node_id: str, ratio: float, is_intersecting: bool = True) -> bool:
        """
        Feed one intersection sample.

        Returns:
            True if the sample produced an enter transition
        """
        obs = self._observations.get(node_id)
        if obs is None:
            log.debug("Sample for unobserved node ignored", node=node_id)
            return False

        ratio = max(0.0, min(1.0, float(ratio)))
        visible = is_intersecting and ratio >= obs.lowest
        obs.last_ratio = ratio

        if not visible:
            obs.inside = False
            return False
        if obs.inside:
            return False

        obs.inside = True
        obs.entries += 1
        threshold = obs.lowest

        box: List[int] = []
        handle = self.scheduler.request_frame(lambda now_ms: self._deliver(node_id, ratio, threshold, box))
        box.append(handle)
        obs.pending.append(handle)
        return True

    def _deliver(self, node_id: str, ratio: float, threshold: float, box: List[int]) -> None:
        obs = self._observations.get(node_id)
        if obs is None:
            return
        if box and box[0] in obs.pending:
            obs.pending.remove(box[0])

        log.debug("Node entered viewport", node=node_id, ratio=f"{ratio:.2f}")
        for callback in list(self._callbacks):
            callback(obs.node, ratio)
        if self.event_bus:
            self.event_bus.emit(VisibilityEnteredEvent(node_id, ratio, threshold))
