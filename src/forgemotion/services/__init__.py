"""Services layer"""

from .event_bus import EventBus
from .capabilities import CapabilityLoader, FrameTimingCapability, InstantTimingCapability, TimingCapability
from .motion_preference import MotionPreferenceGate
from .visibility_watcher import VisibilityWatcher
from .pointer_field import PointerFieldEngine
from .scroll_relay import ScrollPositionRelay, ScrollEffects, SectionTracker
from .interaction_feedback import InteractionFeedback
from .announcer import AnnouncementQueue

__all__ = [
    "EventBus",
    "CapabilityLoader",
    "FrameTimingCapability",
    "InstantTimingCapability",
    "TimingCapability",
    "MotionPreferenceGate",
    "VisibilityWatcher",
    "PointerFieldEngine",
    "ScrollPositionRelay",
    "ScrollEffects",
    "SectionTracker",
    "InteractionFeedback",
    "AnnouncementQueue",
]
