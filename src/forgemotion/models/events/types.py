from enum import Enum, auto


class EventType(Enum):
    # Inputs from the hosting page
    VISIBILITY_ENTERED = auto()
    POINTER_MOVED = auto()
    POINTER_LEFT = auto()
    PRESS_STARTED = auto()
    PRESS_RELEASED = auto()
    HOVER_CHANGED = auto()
    MOTION_PREFERENCE_CHANGED = auto()

    # Animation lifecycle
    ANIMATION_STARTED = auto()
    ANIMATION_FINISHED = auto()
    ANIMATION_FAILED = auto()

    # Scroll
    SCROLL_FRAME = auto()
    SECTION_CHANGED = auto()

    # Accessibility
    ANNOUNCEMENT_DELIVERED = auto()
