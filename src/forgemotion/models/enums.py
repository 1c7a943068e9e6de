"""
Enums for the motion orchestration engine
"""

from enum import Enum, auto


class AnimationKind(Enum):
    """
    Animation family assigned to a node.

    Resolved once at registration time from the node's declared
    classification markers (see CLASS_MARKERS for precedence).
    """
    FADE = auto()
    STAGGER = auto()
    REVEAL = auto()
    COUNTER = auto()
    TYPEWRITER = auto()
    TITLE_CHARS = auto()
    DEFAULT = auto()


class NodeState(Enum):
    """One-shot animation lifecycle: PENDING → RUNNING → DONE"""
    PENDING = auto()
    RUNNING = auto()
    DONE = auto()


class CounterFormat(Enum):
    """Display style of a numeric counter"""
    NUMBER = "number"          # 1,000
    PERCENTAGE = "percentage"  # 1000%
    CURRENCY = "currency"      # $1,000


class PointerKind(Enum):
    MOVE = auto()
    LEAVE = auto()


class ScrollDirection(Enum):
    UP = auto()
    DOWN = auto()


class FeedbackEffect(Enum):
    """Interaction feedback surfaces a node can opt into"""
    RIPPLE = auto()
    PRESS = auto()
    HOVER_SCALE = auto()
    HOVER_GLOW = auto()


class FramePhase(Enum):
    """
    Ordering bucket for frame callbacks.

    Lower value runs first within one tick. The scroll relay resolves its
    offset in WRITE before any reader in READ mutates styles.
    """
    WRITE = 0
    READ = 1


class LogLevel(Enum):
    """Log severity levels"""
    DEBUG = auto()
    INFO = auto()
    WARN = auto()
    ERROR = auto()


class LogCategory(Enum):
    """Log categories for grouping related events"""
    CONFIG = auto()         # Configuration loading, validation
    ANIMATION = auto()      # Per-kind routines
    DISPATCH = auto()       # Kind resolution, idempotence, failures
    POINTER = auto()        # Magnetic field, tilt
    SCROLL = auto()         # Scroll relay, parallax, progress
    VISIBILITY = auto()     # Viewport intersection
    MOTION = auto()         # Reduced-motion preference
    FEEDBACK = auto()       # Ripples, hover, press
    A11Y = auto()           # Screen reader announcements
    EVENT = auto()          # Event bus events and handling
    RENDER_ENGINE = auto()  # Frame scheduler
    SYSTEM = auto()         # Startup, shutdown, errors

