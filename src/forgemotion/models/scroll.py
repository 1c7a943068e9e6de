"""Scroll frame model"""

from dataclasses import dataclass

from forgemotion.models.enums import ScrollDirection


@dataclass(frozen=True)
class ScrollFrame:
    """
    Coalesced scroll state, produced at most once per rendering frame.

    offset: authoritative scroll position (smoothed or native)
    velocity: smoothed speed in px/ms (mean of recent samples)
    timestamp: frame time in ms
    progress: offset / scrollable height, clamped to [0, 1]
    """
    offset: float
    velocity: float
    timestamp: float
    direction: ScrollDirection = ScrollDirection.DOWN
    progress: float = 0.0
    is_scrolling: bool = False
