"""
Event system for the motion engine

Typed events travel over an explicit EventBus instance: input sources
publish, the dispatcher and pointer engine subscribe.
"""

from forgemotion.models.events.types import EventType
from forgemotion.models.events.base import Event
from forgemotion.models.events.sources import EventSource

from forgemotion.models.events.input_events import (
    VisibilityEnteredEvent,
    PointerMovedEvent,
    PointerLeftEvent,
    PressStartedEvent,
    PressReleasedEvent,
    HoverChangedEvent,
    MotionPreferenceChangedEvent,
)

from forgemotion.models.events.output_events import (
    AnimationStartedEvent,
    AnimationFinishedEvent,
    AnimationFailedEvent,
    ScrollFrameEvent,
    SectionChangedEvent,
    AnnouncementDeliveredEvent,
)

__all__ = [
    "EventType",
    "Event",
    "EventSource",

    # Inputs
    "VisibilityEnteredEvent",
    "PointerMovedEvent",
    "PointerLeftEvent",
    "PressStartedEvent",
    "PressReleasedEvent",
    "HoverChangedEvent",
    "MotionPreferenceChangedEvent",

    # Outputs
    "AnimationStartedEvent",
    "AnimationFinishedEvent",
    "AnimationFailedEvent",
    "ScrollFrameEvent",
    "SectionChangedEvent",
    "AnnouncementDeliveredEvent",
]
