"""Events published by the engine for collaborators"""

from dataclasses import dataclass
from typing import Optional

from forgemotion.models.enums import AnimationKind, ScrollDirection
from forgemotion.models.events.base import Event
from forgemotion.models.events.types import EventType
from forgemotion.models.events.sources import EventSource
from forgemotion.models.scroll import ScrollFrame


@dataclass(init=False)
class AnimationStartedEvent(Event):
    node_id: str
    kind: AnimationKind

    def __init__(self, node_id: str, kind: AnimationKind):
        super().__init__(type=EventType.ANIMATION_STARTED, source=EventSource.DISPATCHER)
        self.node_id = node_id
        self.kind = kind


@dataclass(init=False)
class AnimationFinishedEvent(Event):
    """
    A node reached its end state.

    instant: end state applied without motion (reduced motion or snap)
    failed: end state forced after the routine raised
    """
    node_id: str
    kind: AnimationKind
    instant: bool
    failed: bool

    def __init__(self, node_id: str, kind: AnimationKind, instant: bool = False, failed: bool = False):
        super().__init__(type=EventType.ANIMATION_FINISHED, source=EventSource.DISPATCHER)
        self.node_id = node_id
        self.kind = kind
        self.instant = instant
        self.failed = failed


@dataclass(init=False)
class AnimationFailedEvent(Event):
    node_id: str
    kind: AnimationKind
    error: str

    def __init__(self, node_id: str, kind: AnimationKind, error: str):
        super().__init__(type=EventType.ANIMATION_FAILED, source=EventSource.DISPATCHER)
        self.node_id = node_id
        self.kind = kind
        self.error = error


@dataclass(init=False)
class ScrollFrameEvent(Event):
    frame: ScrollFrame

    def __init__(self, frame: ScrollFrame):
        super().__init__(type=EventType.SCROLL_FRAME, source=EventSource.SCROLL_RELAY)
        self.frame = frame


@dataclass(init=False)
class SectionChangedEvent(Event):
    section_id: str
    previous_id: Optional[str]
    direction: ScrollDirection

    def __init__(self, section_id: str, previous_id: Optional[str], direction: ScrollDirection):
        super().__init__(type=EventType.SECTION_CHANGED, source=EventSource.SCROLL_RELAY)
        self.section_id = section_id
        self.previous_id = previous_id
        self.direction = direction


@dataclass(init=False)
class AnnouncementDeliveredEvent(Event):
    message: str

    def __init__(self, message: str):
        super().__init__(type=EventType.ANNOUNCEMENT_DELIVERED, source=EventSource.ANNOUNCER)
        self.message = message
