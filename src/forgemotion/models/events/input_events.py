"""Input events fed by the hosting page and the visibility watcher"""

from dataclasses import dataclass

from forgemotion.models.events.base import Event
from forgemotion.models.events.types import EventType
from forgemotion.models.events.sources import EventSource


@dataclass(init=False)
class VisibilityEnteredEvent(Event):
    """A node entered the viewport at or above its lowest threshold"""
    node_id: str
    ratio: float
    threshold: float

    def __init__(self, node_id: str, ratio: float, threshold: float):
        """
        Args:
            node_id: Observed node
            ratio: Raw intersection ratio of the sample that caused the entry
            threshold: Lowest configured threshold crossed by that sample
        """
        super().__init__(
            type=EventType.VISIBILITY_ENTERED,
            source=EventSource.VISIBILITY_WATCHER,
        )
        self.node_id = node_id
        self.ratio = ratio
        self.threshold = threshold


@dataclass(init=False)
class PointerMovedEvent(Event):
    x: float
    y: float

    def __init__(self, x: float, y: float):
        super().__init__(type=EventType.POINTER_MOVED, source=EventSource.HOST)
        self.x = x
        self.y = y


@dataclass(init=False)
class PointerLeftEvent(Event):
    """Pointer left the document"""

    def __init__(self):
        super().__init__(type=EventType.POINTER_LEFT, source=EventSource.HOST)


@dataclass(init=False)
class PressStartedEvent(Event):
    target_id: str
    x: float
    y: float

    def __init__(self, target_id: str, x: float, y: float):
        """
        Args:
            target_id: Pressed node
            x, y: Press position relative to the target's top-left corner
        """
        super().__init__(type=EventType.PRESS_STARTED, source=EventSource.HOST)
        self.target_id = target_id
        self.x = x
        self.y = y


@dataclass(init=False)
class PressReleasedEvent(Event):
    target_id: str

    def __init__(self, target_id: str):
        super().__init__(type=EventType.PRESS_RELEASED, source=EventSource.HOST)
        self.target_id = target_id


@dataclass(init=False)
class HoverChangedEvent(Event):
    target_id: str
    entered: bool

    def __init__(self, target_id: str, entered: bool):
        super().__init__(type=EventType.HOVER_CHANGED, source=EventSource.HOST)
        self.target_id = target_id
        self.entered = entered


@dataclass(init=False)
class MotionPreferenceChangedEvent(Event):
    old: bool
    new: bool

    def __init__(self, old: bool, new: bool):
        super().__init__(
            type=EventType.MOTION_PREFERENCE_CHANGED,
            source=EventSource.MOTION_GATE,
        )
        self.old = old
        self.new = new
