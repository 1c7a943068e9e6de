from enum import Enum, auto


class EventSource(Enum):
    """Event source identifiers"""
    HOST = auto()                 # Hosting page feeds (pointer, press, hover)
    VISIBILITY_WATCHER = auto()
    MOTION_GATE = auto()
    DISPATCHER = auto()
    SCROLL_RELAY = auto()
    ANNOUNCER = auto()
